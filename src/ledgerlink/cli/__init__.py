"""Command-line interface for LedgerLink."""
