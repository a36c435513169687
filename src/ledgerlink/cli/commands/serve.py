"""Run the LedgerLink web server."""

import logging
from typing import Annotated

import typer

from ...config import get_settings
from ...logging import setup_logging
from ...web import create_app

logger = logging.getLogger(__name__)


def serve(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Interface to bind (default from settings)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", help="Port to listen on (default from settings)"),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Run Flask in debug mode with the reloader"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose debug logging"),
    ] = False,
) -> None:
    """Serve the frontend and the Plaid gateway routes.

    Example:
        ledgerlink serve --port 8080
    """
    try:
        settings = get_settings()
    except ValueError as e:
        logger.error(f"❌ {e}")
        raise typer.Exit(1) from e

    setup_logging(settings.logging, verbose=verbose)

    app = create_app(settings)
    bind_host = host or settings.server.host
    bind_port = port or settings.server.port
    logger.info(f"Starting LedgerLink on http://{bind_host}:{bind_port}")
    app.run(host=bind_host, port=bind_port, debug=debug or settings.debug)
