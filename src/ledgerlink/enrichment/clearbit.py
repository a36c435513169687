"""Clearbit company lookup by name.

Uses the Name To Domain endpoint, which resolves a company name to its
domain and logo. A 404 from Clearbit means no match.
"""

import logging
from typing import Any

import requests

from ..config import EnrichmentConfig

logger = logging.getLogger(__name__)


class CompanyLookup:
    """Thin client for the Clearbit company API."""

    def __init__(
        self, config: EnrichmentConfig, session: requests.Session | None = None
    ):
        self.config = config
        self.session = session or requests.Session()

    def company_info(self, name: str) -> dict[str, Any] | None:
        """Look up a company by name.

        Args:
            name: Company name as typed by the user

        Returns:
            dict | None: ``{"name", "domain", "logo"}`` or None when Clearbit
            knows no such company.

        Raises:
            requests.HTTPError: For any non-404 error response
        """
        if not name.strip():
            return None

        response = self.session.get(
            f"{self.config.base_url.rstrip('/')}/v1/domains/find",
            params={"name": name},
            auth=(self.config.clearbit_key, ""),
            timeout=self.config.timeout_seconds,
        )
        if response.status_code == 404:
            logger.debug(f"No company found for {name!r}")
            return None
        response.raise_for_status()

        company = response.json()
        return company if isinstance(company, dict) and company else None
