"""Shared pytest fixtures for ledgerlink tests.

Provides settings isolated from the host environment, a mocked Plaid SDK
client injected into ProviderClient, and a Flask test client wired to both.
"""

import json
from collections.abc import Generator
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest
from flask import Flask
from flask.testing import FlaskClient
from plaid.exceptions import ApiException

from ledgerlink.config import (
    EnrichmentConfig,
    GatewaySettings,
    PlaidConfig,
    ServerConfig,
    clear_settings_cache,
)
from ledgerlink.enrichment import CompanyLookup
from ledgerlink.provider import AccessCredential, ProviderClient
from ledgerlink.services import CredentialStore
from ledgerlink.web import create_app

_CREDENTIAL_ENV_VARS = [
    "PLAID_CLIENT_ID",
    "PLAID_SECRET",
    "PLAID_PUBLIC_KEY",
    "PLAID_ENV",
    "CLEARBIT_KEY",
]


def plaid_error(
    error_type: str, error_code: str, error_message: str = "", status: int = 400
) -> ApiException:
    """Build an ApiException carrying a Plaid-style JSON error body."""
    exc = ApiException(status=status, reason="Bad Request")
    exc.body = json.dumps({
        "error_type": error_type,
        "error_code": error_code,
        "error_message": error_message,
        "display_message": None,
        "request_id": "req-test",
    })
    return exc


def make_transactions(n: int) -> list[dict[str, Any]]:
    """Return ``n`` transaction records shaped like Plaid's."""
    return [
        {
            "transaction_id": f"tx_{i}",
            "account_id": "acc_123",
            "amount": 12.34 + i,
            "iso_currency_code": "USD",
            "date": "2024-05-01",
            "name": f"Merchant {i}",
            "pending": False,
        }
        for i in range(n)
    ]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep host credentials and cached settings out of every test."""
    for name in _CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def public_folder(tmp_path: Path) -> Path:
    """A built frontend with an entry document and a docs entry document."""
    build = tmp_path / "build"
    (build / "docs").mkdir(parents=True)
    (build / "index.html").write_text("<html>app</html>")
    (build / "docs" / "index.html").write_text("<html>docs</html>")
    (build / "app.js").write_text("console.log('app');")
    return build


@pytest.fixture
def settings(public_folder: Path) -> GatewaySettings:
    return GatewaySettings(
        plaid=PlaidConfig(client_id="dummy", secret="dummy", public_key="pk-dummy"),
        enrichment=EnrichmentConfig(clearbit_key="ck-dummy"),
        server=ServerConfig(secret_key="test-secret", public_folder=public_folder),
    )


@pytest.fixture
def plaid_api() -> MagicMock:
    """Stand-in for plaid_api.PlaidApi."""
    api = MagicMock()
    api.transactions_get.return_value = SimpleNamespace(
        transactions=[], total_transactions=0
    )
    return api


@pytest.fixture
def provider(settings: GatewaySettings, plaid_api: MagicMock) -> ProviderClient:
    return ProviderClient(settings.plaid, api=plaid_api)


@pytest.fixture
def company_lookup() -> MagicMock:
    lookup = MagicMock(spec=CompanyLookup)
    lookup.company_info.return_value = None
    return lookup


@pytest.fixture
def credential_store() -> CredentialStore:
    return CredentialStore()


@pytest.fixture
def app(
    settings: GatewaySettings,
    provider: ProviderClient,
    company_lookup: MagicMock,
    credential_store: CredentialStore,
) -> Flask:
    app = create_app(
        settings,
        provider=provider,
        company_lookup=company_lookup,
        credential_store=credential_store,
    )
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture
def linked_client(client: FlaskClient, credential_store: CredentialStore) -> FlaskClient:
    """A test client whose session is authenticated and linked to an item."""
    credential_store.save(
        "link-1", AccessCredential(access_token="access-sandbox-1", item_id="item-1")
    )
    with client.session_transaction() as sess:
        sess["authenticated"] = True
        sess["link_id"] = "link-1"
    return client
