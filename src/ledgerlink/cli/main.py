"""Main CLI application for LedgerLink.

This module provides the unified entry point for running the gateway and
for the development helpers around it.
"""

import logging

import typer

from .commands import config, sandbox
from .commands.serve import serve

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="ledgerlink",
    help="LedgerLink: session-gated gateway to the Plaid API",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.command("serve")(serve)
app.add_typer(sandbox.app, name="sandbox", help="Plaid sandbox helpers")
app.add_typer(config.app, name="config", help="Configuration inspection")


def main() -> None:
    """Entry point for the LedgerLink CLI application."""
    app()


if __name__ == "__main__":
    main()
