"""Flask application factory for the LedgerLink gateway."""

import logging
import secrets
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from flask import Flask
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS

from ..config import GatewaySettings
from ..enrichment import CompanyLookup
from ..provider import ProviderClient
from ..services import (
    CredentialStore,
    SessionGate,
    TokenExchangeService,
    TransactionGateway,
)
from .routes import (
    register_company_routes,
    register_page_routes,
    register_session_gate,
    register_token_routes,
    register_transaction_routes,
)

logger = logging.getLogger(__name__)


class GatewayJSONProvider(DefaultJSONProvider):
    """JSON provider writing dates as ISO 8601, the way Plaid sends them."""

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, date):
            return o.isoformat()
        if isinstance(o, Decimal):
            return float(o)
        return DefaultJSONProvider.default(o)


def create_app(
    settings: GatewaySettings,
    provider: ProviderClient | None = None,
    company_lookup: CompanyLookup | None = None,
    credential_store: CredentialStore | None = None,
) -> Flask:
    """Build the Flask application.

    Args:
        settings: Loaded configuration
        provider: Plaid client; built from ``settings.plaid`` when omitted
        company_lookup: Company enrichment client; built from
            ``settings.enrichment`` when omitted
        credential_store: Holder for linked access tokens; entries expire
            after ``settings.server.session_lifetime_hours`` when omitted

    Returns:
        Flask: The configured application
    """
    public_folder = settings.server.public_folder.resolve()
    app = Flask(
        __name__,
        static_folder=str(public_folder),
        static_url_path="",
    )
    app.json = GatewayJSONProvider(app)

    secret_key = settings.server.secret_key
    if secret_key is None:
        logger.warning(
            "No server.secret_key configured; sessions will not survive a restart"
        )
        secret_key = secrets.token_hex(32)

    session_lifetime = timedelta(hours=settings.server.session_lifetime_hours)
    app.config.update(
        SECRET_KEY=secret_key,
        PERMANENT_SESSION_LIFETIME=session_lifetime,
        PUBLIC_FOLDER=str(public_folder),
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        DEBUG=settings.debug,
    )

    if settings.server.cors_origins:
        CORS(
            app,
            origins=settings.server.cors_origins,
            supports_credentials=True,
        )

    missing = settings.missing_credentials()
    if missing:
        logger.warning(f"Missing credentials: {', '.join(missing)}")

    if provider is None:
        provider = ProviderClient(settings.plaid)
    if company_lookup is None:
        company_lookup = CompanyLookup(settings.enrichment)
    store = (
        credential_store
        if credential_store is not None
        else CredentialStore(max_age=session_lifetime)
    )
    gate = SessionGate()

    register_session_gate(app, gate, store)
    register_page_routes(app)
    register_company_routes(app, company_lookup)
    register_transaction_routes(app, TransactionGateway(provider), store)
    register_token_routes(
        app,
        TokenExchangeService(provider),
        gate,
        store,
        require_session=settings.server.require_session_for_token_exchange,
    )

    app.extensions["ledgerlink"] = {
        "provider": provider,
        "company_lookup": company_lookup,
        "credential_store": store,
    }

    logger.info(f"LedgerLink app ready, serving frontend from {public_folder}")
    return app
