"""Public token to access token exchange."""

import logging
from typing import Protocol

from ..provider.schemas import AccessCredential, Fault, ProviderResult

logger = logging.getLogger(__name__)


class TokenExchanger(Protocol):
    def exchange_token(self, public_token: str) -> ProviderResult[AccessCredential]: ...


class TokenExchangeService:
    """Exchanges a single-use public token through the provider client.

    Storing the resulting credential is up to the caller.
    """

    def __init__(self, provider: TokenExchanger):
        self.provider = provider

    def exchange_public_token(
        self, public_token: str
    ) -> ProviderResult[AccessCredential]:
        result = self.provider.exchange_token(public_token)
        if isinstance(result, Fault):
            logger.info(f"Public token exchange failed with {result.error_code}")
        return result
