"""Configuration inspection commands."""

import json
import logging

import typer

from ...config import get_settings

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="config",
    help="Configuration inspection",
    no_args_is_help=True,
)


@app.command("show")
def show_config() -> None:
    """Show the effective configuration with secrets masked.

    Example:
        ledgerlink config show
    """
    try:
        settings = get_settings()
    except ValueError as e:
        logger.error(f"❌ {e}")
        raise typer.Exit(1) from e

    print(json.dumps(settings.masked_summary(), indent=2))

    missing = settings.missing_credentials()
    if missing:
        print(f"\n⚠️  Not set: {', '.join(missing)}")
