"""LedgerLink: session-gated gateway between a single-page frontend and Plaid.

This package provides:
- A Plaid client that reports recognized provider errors as values
- Transaction listing and public-token exchange services
- A Flask application that gates sensitive routes behind the session
- A CLI for running the server and preparing sandbox tokens

No financial data is persisted; records are passed through as Plaid returns them.
"""

__version__ = "0.1.0"
