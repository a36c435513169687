"""Plaid provider access for LedgerLink."""

from .client import ProviderClient, TransactionRecord
from .schemas import (
    AccessCredential,
    Fault,
    Ok,
    ProviderError,
    ProviderErrorType,
    ProviderResult,
    TransactionQuery,
)

__all__ = [
    "ProviderClient",
    "TransactionRecord",
    "AccessCredential",
    "Fault",
    "Ok",
    "ProviderError",
    "ProviderErrorType",
    "ProviderResult",
    "TransactionQuery",
]
