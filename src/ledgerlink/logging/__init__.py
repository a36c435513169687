"""Logging utilities for LedgerLink."""

from .config import get_log_config_summary, setup_logging

__all__ = ["setup_logging", "get_log_config_summary"]
