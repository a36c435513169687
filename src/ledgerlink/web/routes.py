"""Route registration for the LedgerLink web application."""

import logging
from typing import Any

from flask import (
    Flask,
    Response,
    current_app,
    jsonify,
    request,
    send_from_directory,
    session,
)

from ..enrichment import CompanyLookup
from ..provider.schemas import Fault
from ..services import (
    CredentialStore,
    RequestContext,
    SessionGate,
    TokenExchangeService,
    TransactionGateway,
)

logger = logging.getLogger(__name__)

PROTECTED_PREFIX = "/transactions"
JSON_MIMETYPE = "application/json"

# Session cookie keys
SESSION_AUTHENTICATED = "authenticated"
SESSION_LINK_ID = "link_id"


def current_context(store: CredentialStore) -> RequestContext:
    """Build the explicit request context from the host session.

    A session counts as authenticated only while its credential is still in
    the store; a flagged cookie whose credential was evicted, or lives in
    another process, is anonymous.
    """
    credential = store.load(session.get(SESSION_LINK_ID))
    return RequestContext(
        is_authenticated=bool(session.get(SESSION_AUTHENTICATED))
        and credential is not None,
        access_token=credential.access_token if credential else None,
    )


def forbidden() -> Response:
    return Response("", status=403, mimetype=JSON_MIMETYPE)


def fault_response(fault: Fault) -> tuple[Response, int]:
    return jsonify(fault.error.to_payload()), 400


def register_session_gate(app: Flask, gate: SessionGate, store: CredentialStore) -> None:
    @app.before_request
    def authorize_protected_paths() -> Response | None:
        if not request.path.startswith(PROTECTED_PREFIX):
            return None
        # CORS preflights never carry the session cookie
        if request.method == "OPTIONS":
            return None
        if gate.authorize(current_context(store)):
            return None
        logger.info(f"Rejected unauthenticated request to {request.path}")
        return forbidden()


def register_page_routes(app: Flask) -> None:
    @app.get("/")
    def index() -> Response:
        return send_from_directory(current_app.config["PUBLIC_FOLDER"], "index.html")

    @app.get("/docs/")
    def docs_index() -> Response:
        return send_from_directory(
            current_app.config["PUBLIC_FOLDER"], "docs/index.html"
        )


def register_company_routes(app: Flask, lookup: CompanyLookup) -> None:
    @app.get("/companies/<name>")
    def company(name: str) -> Any:
        info = lookup.company_info(name)
        if not info:
            return Response("Company not found", status=404, mimetype="text/plain")
        return jsonify(info)


def register_transaction_routes(
    app: Flask, gateway: TransactionGateway, store: CredentialStore
) -> None:
    @app.get("/transactions")
    def transactions() -> Any:
        """List one page of transactions.

        Query parameters ``count`` and ``offset`` are optional; see
        https://plaid.com/docs/api/products/transactions/ for record fields.
        """
        context = current_context(store)
        result = gateway.get_transactions(
            request.args.get("offset"),
            request.args.get("count"),
            access_token=context.access_token or "",
        )
        if isinstance(result, Fault):
            return fault_response(result)
        return jsonify(result.value)


def register_token_routes(
    app: Flask,
    exchange: TokenExchangeService,
    gate: SessionGate,
    store: CredentialStore,
    require_session: bool,
) -> None:
    @app.post("/get_access_token")
    def get_access_token() -> Any:
        """Exchange a Plaid Link public token and link it to this session."""
        if require_session and not gate.authorize(current_context(store)):
            return forbidden()

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = request.form
        public_token = payload.get("public_token")

        result = exchange.exchange_public_token(
            public_token if isinstance(public_token, str) else ""
        )
        if isinstance(result, Fault):
            return fault_response(result)

        credential = result.value
        link_id = session.get(SESSION_LINK_ID) or store.new_link_id()
        store.save(link_id, credential)
        session[SESSION_LINK_ID] = link_id
        session[SESSION_AUTHENTICATED] = True
        session.permanent = True

        return jsonify(
            {"access_token": credential.access_token, "item_id": credential.item_id}
        )

    @app.post("/logout")
    def logout() -> Response:
        store.forget(session.get(SESSION_LINK_ID))
        session.clear()
        return Response("", status=204)
