"""Plaid sandbox helpers for local development."""

import logging
from typing import Annotated

import typer

from ...config import get_settings
from ...logging import setup_logging
from ...provider import ProviderClient

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="sandbox",
    help="Plaid sandbox helpers",
    no_args_is_help=True,
)


@app.command("public-token")
def public_token(
    institution_id: Annotated[
        str,
        typer.Option("--institution-id", "-i", help="Sandbox institution ID"),
    ] = "ins_109508",
    products: Annotated[
        list[str] | None,
        typer.Option("--product", help="Initial product (repeatable)"),
    ] = None,
) -> None:
    """Create a sandbox public token and print it to stdout.

    The token can be posted to /get_access_token to link a session
    without going through Plaid Link.

    Example:
        ledgerlink sandbox public-token --product transactions
    """
    setup_logging(cli_mode=True)
    settings = get_settings()

    client = ProviderClient(settings.plaid)
    try:
        token = client.create_sandbox_public_token(
            institution_id=institution_id, initial_products=products
        )
    except ValueError as e:
        logger.error(f"❌ {e}")
        raise typer.Exit(1) from e

    print(token)
