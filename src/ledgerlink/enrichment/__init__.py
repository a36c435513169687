"""Company enrichment lookups."""

from .clearbit import CompanyLookup

__all__ = ["CompanyLookup"]
