"""Paginated transaction retrieval through the provider client."""

import logging
from typing import Any, Protocol

from ..provider.client import TransactionRecord
from ..provider.schemas import Fault, ProviderResult, TransactionQuery

logger = logging.getLogger(__name__)


class TransactionLister(Protocol):
    def list_transactions(
        self, access_token: str, offset: int, count: int
    ) -> ProviderResult[list[TransactionRecord]]: ...


class TransactionGateway:
    """Translates raw pagination parameters into a provider listing call."""

    def __init__(self, provider: TransactionLister):
        self.provider = provider

    def get_transactions(
        self, raw_offset: Any, raw_count: Any, access_token: str
    ) -> ProviderResult[list[TransactionRecord]]:
        """Fetch one page of transactions.

        Args:
            raw_offset: Offset as received from the client; may be missing or
                non-numeric, in which case it is treated as 0
            raw_count: Count as received from the client, parsed the same way
            access_token: Access token of the linked account

        Returns:
            Ok with the provider records unmodified, or the provider Fault.
        """
        query = TransactionQuery.from_raw(raw_offset, raw_count)
        result = self.provider.list_transactions(
            access_token, offset=query.offset, count=query.count
        )
        if isinstance(result, Fault):
            logger.info(
                f"Transaction listing failed with {result.error_code} "
                f"(offset={query.offset}, count={query.count})"
            )
        return result
