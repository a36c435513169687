# ruff: noqa: S101,S106
"""Tests for the Flask routes.

Exercises the full request path through the session gate, the services and
ProviderClient, with only the Plaid SDK client mocked.
"""

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from conftest import make_transactions, plaid_error
from flask import Flask
from flask.testing import FlaskClient
from plaid.exceptions import ApiException

from ledgerlink.config import GatewaySettings, ServerConfig
from ledgerlink.provider import AccessCredential, ProviderClient
from ledgerlink.services import CredentialStore
from ledgerlink.web import create_app


class TestTransactionsRoute:
    """Tests for GET /transactions."""

    @pytest.mark.unit
    def test_returns_records_for_linked_session(
        self, linked_client: FlaskClient, plaid_api: MagicMock
    ) -> None:
        plaid_api.transactions_get.return_value = SimpleNamespace(
            transactions=make_transactions(10), total_transactions=10
        )

        response = linked_client.get("/transactions?count=10&offset=0")

        assert response.status_code == 200
        assert response.mimetype == "application/json"
        body = response.get_json()
        assert isinstance(body, list)
        assert len(body) == 10
        request = plaid_api.transactions_get.call_args.args[0]
        assert request.access_token == "access-sandbox-1"
        assert request.options.count == 10
        assert request.options.offset == 0

    @pytest.mark.unit
    def test_anonymous_request_is_forbidden_without_provider_call(
        self, client: FlaskClient, plaid_api: MagicMock
    ) -> None:
        response = client.get("/transactions")

        assert response.status_code == 403
        assert response.data == b""
        assert response.mimetype == "application/json"
        assert plaid_api.transactions_get.call_count == 0

    @pytest.mark.unit
    def test_protected_prefix_covers_subpaths(self, client: FlaskClient) -> None:
        response = client.get("/transactions/recent")

        assert response.status_code == 403

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error_type,error_code",
        [
            ("ITEM_ERROR", "ITEM_LOGIN_REQUIRED"),
            ("INVALID_INPUT", "INVALID_ACCESS_TOKEN"),
            ("INVALID_REQUEST", "MISSING_FIELDS"),
        ],
    )
    def test_provider_errors_become_400(
        self,
        linked_client: FlaskClient,
        plaid_api: MagicMock,
        error_type: str,
        error_code: str,
    ) -> None:
        plaid_api.transactions_get.side_effect = plaid_error(
            error_type, error_code, "provider said no"
        )

        response = linked_client.get("/transactions?count=10&offset=0")

        assert response.status_code == 400
        assert response.get_json() == {
            "error": {"error_code": error_code, "error_message": "provider said no"}
        }

    @pytest.mark.unit
    def test_absent_count_is_rejected_as_invalid_field(
        self, linked_client: FlaskClient, plaid_api: MagicMock
    ) -> None:
        response = linked_client.get("/transactions")

        assert response.status_code == 400
        assert response.get_json()["error"]["error_code"] == "INVALID_FIELD"
        assert plaid_api.transactions_get.call_count == 0

    @pytest.mark.unit
    def test_unexpected_provider_error_is_not_swallowed(
        self, linked_client: FlaskClient, plaid_api: MagicMock
    ) -> None:
        plaid_api.transactions_get.side_effect = plaid_error(
            "RATE_LIMIT_EXCEEDED", "TRANSACTIONS_LIMIT", status=429
        )

        with pytest.raises(ApiException):
            linked_client.get("/transactions?count=10&offset=0")


class TestAccessTokenRoute:
    """Tests for POST /get_access_token."""

    @pytest.mark.unit
    def test_rejected_public_token_is_400(
        self, client: FlaskClient, plaid_api: MagicMock
    ) -> None:
        plaid_api.item_public_token_exchange.side_effect = plaid_error(
            "INVALID_INPUT", "INVALID_PUBLIC_TOKEN", "provided public token is invalid"
        )

        response = client.post("/get_access_token", json={"public_token": "bad"})

        assert response.status_code == 400
        assert response.get_json() == {
            "error": {
                "error_code": "INVALID_PUBLIC_TOKEN",
                "error_message": "provided public token is invalid",
            }
        }
        with client.session_transaction() as sess:
            assert not sess.get("authenticated")

    @pytest.mark.unit
    def test_successful_exchange_links_session(
        self,
        client: FlaskClient,
        plaid_api: MagicMock,
        credential_store: CredentialStore,
    ) -> None:
        plaid_api.item_public_token_exchange.return_value = SimpleNamespace(
            access_token="access-sandbox-9", item_id="item-9"
        )
        plaid_api.transactions_get.return_value = SimpleNamespace(
            transactions=make_transactions(2)
        )

        response = client.post("/get_access_token", json={"public_token": "good"})

        assert response.status_code == 200
        assert response.get_json() == {
            "access_token": "access-sandbox-9",
            "item_id": "item-9",
        }
        assert len(credential_store) == 1

        follow_up = client.get("/transactions?count=2")
        assert follow_up.status_code == 200
        request = plaid_api.transactions_get.call_args.args[0]
        assert request.access_token == "access-sandbox-9"

    @pytest.mark.unit
    def test_accepts_form_body(self, client: FlaskClient, plaid_api: MagicMock) -> None:
        plaid_api.item_public_token_exchange.return_value = SimpleNamespace(
            access_token="access-1", item_id="item-1"
        )

        response = client.post("/get_access_token", data={"public_token": "good"})

        assert response.status_code == 200
        request = plaid_api.item_public_token_exchange.call_args.args[0]
        assert request.public_token == "good"

    @pytest.mark.unit
    def test_session_can_be_required(
        self,
        settings: GatewaySettings,
        provider: ProviderClient,
        company_lookup: MagicMock,
        plaid_api: MagicMock,
    ) -> None:
        gated = settings.model_copy(
            update={
                "server": ServerConfig(
                    secret_key="test-secret",
                    public_folder=settings.server.public_folder,
                    require_session_for_token_exchange=True,
                )
            }
        )
        app = create_app(gated, provider=provider, company_lookup=company_lookup)
        app.config["TESTING"] = True

        response = app.test_client().post(
            "/get_access_token", json={"public_token": "good"}
        )

        assert response.status_code == 403
        assert plaid_api.item_public_token_exchange.call_count == 0


class TestLogoutRoute:
    """Tests for POST /logout."""

    @pytest.mark.unit
    def test_logout_clears_session_and_credential(
        self, linked_client: FlaskClient, credential_store: CredentialStore
    ) -> None:
        response = linked_client.post("/logout")

        assert response.status_code == 204
        assert credential_store.load("link-1") is None
        assert linked_client.get("/transactions").status_code == 403


class TestCompanyRoute:
    """Tests for GET /companies/<name>."""

    @pytest.mark.unit
    def test_unknown_company_is_404(
        self, client: FlaskClient, company_lookup: MagicMock
    ) -> None:
        response = client.get("/companies/unknown-co")

        assert response.status_code == 404
        assert response.data == b"Company not found"
        company_lookup.company_info.assert_called_once_with("unknown-co")

    @pytest.mark.unit
    def test_known_company_is_json(
        self, client: FlaskClient, company_lookup: MagicMock
    ) -> None:
        company_lookup.company_info.return_value = {
            "name": "Acme",
            "domain": "acme.com",
            "logo": "https://logo.clearbit.com/acme.com",
        }

        response = client.get("/companies/Acme")

        assert response.status_code == 200
        assert response.get_json()["domain"] == "acme.com"


class TestPageRoutes:
    """Tests for the frontend entry documents."""

    @pytest.mark.unit
    def test_entry_document(self, client: FlaskClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert b"app" in response.data

    @pytest.mark.unit
    def test_docs_entry_document(self, client: FlaskClient) -> None:
        response = client.get("/docs/")

        assert response.status_code == 200
        assert b"docs" in response.data

    @pytest.mark.unit
    def test_static_assets_are_served(self, client: FlaskClient) -> None:
        response = client.get("/app.js")

        assert response.status_code == 200


class TestSessionLinking:
    """Tests tying the session cookie to the stored credential."""

    @pytest.mark.unit
    def test_injected_empty_store_is_used(
        self, app: Flask, credential_store: CredentialStore
    ) -> None:
        assert len(credential_store) == 0
        assert app.extensions["ledgerlink"]["credential_store"] is credential_store

    @pytest.mark.unit
    def test_flagged_session_without_credential_is_forbidden(
        self, client: FlaskClient, plaid_api: MagicMock
    ) -> None:
        with client.session_transaction() as sess:
            sess["authenticated"] = True
            sess["link_id"] = "gone"

        response = client.get("/transactions?count=10&offset=0")

        assert response.status_code == 403
        assert plaid_api.transactions_get.call_count == 0

    @pytest.mark.unit
    def test_expired_credential_is_forbidden(
        self,
        settings: GatewaySettings,
        provider: ProviderClient,
        company_lookup: MagicMock,
        plaid_api: MagicMock,
    ) -> None:
        now = [0.0]
        store = CredentialStore(max_age=timedelta(hours=1), clock=lambda: now[0])
        app = create_app(
            settings,
            provider=provider,
            company_lookup=company_lookup,
            credential_store=store,
        )
        app.config["TESTING"] = True
        client = app.test_client()
        store.save("link-1", AccessCredential(access_token="access-sandbox-1"))
        with client.session_transaction() as sess:
            sess["authenticated"] = True
            sess["link_id"] = "link-1"

        assert client.get("/transactions?count=1").status_code == 200
        now[0] += 2 * 3600
        assert client.get("/transactions?count=1").status_code == 403
        assert plaid_api.transactions_get.call_count == 1

    @pytest.mark.unit
    def test_preflight_is_not_gated(
        self, client: FlaskClient, plaid_api: MagicMock
    ) -> None:
        response = client.options("/transactions")

        assert response.status_code == 200
        assert plaid_api.transactions_get.call_count == 0

    @pytest.mark.unit
    def test_cors_preflight_is_answered(
        self,
        settings: GatewaySettings,
        provider: ProviderClient,
        company_lookup: MagicMock,
    ) -> None:
        with_cors = settings.model_copy(
            update={
                "server": ServerConfig(
                    secret_key="test-secret",
                    public_folder=settings.server.public_folder,
                    cors_origins=["http://localhost:3000"],
                )
            }
        )
        app = create_app(with_cors, provider=provider, company_lookup=company_lookup)
        app.config["TESTING"] = True

        response = app.test_client().options(
            "/transactions",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert (
            response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
        )
