"""Request-handling services sitting between the web layer and Plaid."""

from .credentials import CredentialStore
from .session_gate import RequestContext, SessionGate
from .token_exchange import TokenExchangeService
from .transactions import TransactionGateway

__all__ = [
    "CredentialStore",
    "RequestContext",
    "SessionGate",
    "TokenExchangeService",
    "TransactionGateway",
]
