"""Plaid API client using straightforward SDK calls.

This module wraps the Plaid Python SDK for the two calls the gateway needs:
exchanging a public token and listing transactions. Recognized Plaid errors
come back as ``Fault`` values; anything else is raised to the caller.
"""

import json
import logging
from datetime import date, timedelta
from typing import Any

from plaid.api import plaid_api
from plaid.api_client import ApiClient
from plaid.configuration import Configuration
from plaid.exceptions import ApiException, ApiTypeError, ApiValueError
from plaid.model.item_public_token_exchange_request import (
    ItemPublicTokenExchangeRequest,
)
from plaid.model.transactions_get_request import TransactionsGetRequest
from plaid.model.transactions_get_request_options import TransactionsGetRequestOptions
from urllib3.exceptions import MaxRetryError
from urllib3.exceptions import TimeoutError as TransportTimeoutError

from ..config import PlaidConfig
from .schemas import (
    RECOGNIZED_ERROR_TYPES,
    AccessCredential,
    Fault,
    Ok,
    ProviderErrorType,
    ProviderResult,
)

logger = logging.getLogger(__name__)

TransactionRecord = dict[str, Any]


def _fault_from_api_exception(exc: ApiException) -> Fault | None:
    """Translate a Plaid API error body into a Fault.

    Returns:
        Fault | None: The fault, or None when the error is not one of the
        recognized client-facing error types.
    """
    body = getattr(exc, "body", None)
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str):
        return None

    try:
        details = json.loads(body)
    except json.JSONDecodeError:
        return None
    if not isinstance(details, dict):
        return None

    error_type = details.get("error_type")
    if error_type not in RECOGNIZED_ERROR_TYPES:
        return None

    return Fault.of(
        error_code=str(details.get("error_code") or error_type),
        error_message=str(details.get("error_message") or ""),
        error_type=error_type,
    )


class ProviderClient:
    """Stateless Plaid client holding only static credentials."""

    def __init__(self, config: PlaidConfig, api: Any | None = None):
        """Initialize the client.

        Args:
            config: Plaid configuration
            api: Pre-built PlaidApi (or a stand-in for it). Built from
                ``config`` when omitted.
        """
        self.config = config

        if api is None:
            configuration = Configuration(
                host=config.host,
                api_key={
                    "clientId": config.client_id,
                    "secret": config.secret,
                },
            )
            # Type as Any to avoid pyright partial-unknowns from the SDK stubs
            api = plaid_api.PlaidApi(ApiClient(configuration))
        self.api: Any = api

        logger.info(f"Initialized Plaid client for {config.environment} environment")

    def _call(self, operation: str, method: Any, request: Any) -> ProviderResult[Any]:
        """Invoke an SDK method, mapping recognized failures to Fault values."""
        try:
            return Ok(method(request, _request_timeout=self.config.timeout_seconds))
        except ApiException as exc:
            fault = _fault_from_api_exception(exc)
            if fault is None:
                logger.error(f"Unrecognized Plaid error during {operation}: {exc}")
                raise
            logger.warning(
                f"Plaid rejected {operation}: {fault.error_type} {fault.error_code}"
            )
            return fault
        except MaxRetryError as exc:
            if not isinstance(exc.reason, TransportTimeoutError):
                raise
            return self._timeout_fault(operation, exc)
        except TransportTimeoutError as exc:
            return self._timeout_fault(operation, exc)

    def _timeout_fault(self, operation: str, exc: Exception) -> Fault:
        logger.warning(f"Plaid {operation} timed out: {exc}")
        return Fault.of(
            error_code="PROVIDER_TIMEOUT",
            error_message=f"The provider did not answer the {operation} request in time",
            error_type=ProviderErrorType.INVALID_REQUEST.value,
        )

    def exchange_token(self, public_token: str) -> ProviderResult[AccessCredential]:
        """Exchange a single-use public token for an access token.

        Args:
            public_token: Token obtained from a successful Plaid Link session

        Returns:
            Ok[AccessCredential] on success, Fault when Plaid rejects the token.
        """
        try:
            request = ItemPublicTokenExchangeRequest(public_token=public_token)
        except (ApiTypeError, ApiValueError) as exc:
            return Fault.of(
                error_code="INVALID_PUBLIC_TOKEN",
                error_message=str(exc),
                error_type=ProviderErrorType.INVALID_INPUT.value,
            )

        result = self._call(
            "public token exchange", self.api.item_public_token_exchange, request
        )
        if isinstance(result, Fault):
            return result

        response = result.value
        credential = AccessCredential(
            access_token=response.access_token,
            item_id=getattr(response, "item_id", None),
        )
        logger.info(f"Exchanged public token for item {credential.item_id}")
        return Ok(credential)

    def list_transactions(
        self, access_token: str, offset: int, count: int
    ) -> ProviderResult[list[TransactionRecord]]:
        """List one page of transactions for a linked account.

        Args:
            access_token: Plaid access token for the item
            offset: Index of the first transaction to return
            count: Number of transactions to return

        Returns:
            Ok[list] of transaction records as Plaid returned them, or Fault.
        """
        end_date = date.today()
        start_date = end_date - timedelta(days=self.config.days_lookback)

        try:
            request = TransactionsGetRequest(
                access_token=access_token,
                start_date=start_date,
                end_date=end_date,
                options=TransactionsGetRequestOptions(count=count, offset=offset),
            )
        except (ApiTypeError, ApiValueError) as exc:
            # The SDK enforces Plaid's field constraints before sending
            return Fault.of(
                error_code="INVALID_FIELD",
                error_message=str(exc),
                error_type=ProviderErrorType.INVALID_REQUEST.value,
            )

        result = self._call("transaction listing", self.api.transactions_get, request)
        if isinstance(result, Fault):
            return result

        transactions = getattr(result.value, "transactions", None) or []
        records = [
            tx.to_dict() if callable(getattr(tx, "to_dict", None)) else dict(tx)
            for tx in transactions
        ]
        logger.debug(
            f"Listed {len(records)} transactions (offset={offset}, count={count})"
        )
        return Ok(records)

    def create_sandbox_public_token(
        self,
        institution_id: str = "ins_109508",
        initial_products: list[str] | None = None,
    ) -> str:
        """Create a Plaid Sandbox public token without going through Link.

        This method exists to support local development against
        ``/get_access_token``.

        Args:
            institution_id: Plaid institution ID for sandbox (e.g., "ins_109508").
            initial_products: List of product names (e.g., ["transactions"]).

        Returns:
            str: Sandbox public token.
        """
        if self.config.environment != "sandbox":
            raise ValueError("create_sandbox_public_token is only available in sandbox")

        # Only needed in sandbox, keep them off the request path
        from plaid.model.products import Products
        from plaid.model.sandbox_public_token_create_request import (
            SandboxPublicTokenCreateRequest,
        )

        products = initial_products or ["transactions"]
        create_req = SandboxPublicTokenCreateRequest(
            institution_id=institution_id,
            initial_products=[Products(p) for p in products],
        )

        logger.info("Creating Plaid sandbox public token…")
        create_resp: Any = self.api.sandbox_public_token_create(create_req)
        public_token = getattr(create_resp, "public_token", None)
        if not isinstance(public_token, str) or not public_token:
            raise RuntimeError("Failed to create sandbox public token")
        return public_token
