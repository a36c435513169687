"""WSGI entry point, e.g. ``gunicorn ledgerlink.web.wsgi:app``."""

from ..config import get_settings
from ..logging import setup_logging
from .app import create_app

settings = get_settings()
setup_logging(settings.logging)
app = create_app(settings)
