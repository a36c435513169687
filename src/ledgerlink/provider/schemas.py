"""Schemas and result types exchanged with the Plaid client.

Recognized provider failures travel as ``Fault`` values rather than
exceptions; callers branch on ``isinstance(result, Fault)``.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

# Leading optionally signed integer, e.g. "12abc" -> 12, " -3" -> -3
_INTEGER_PREFIX = re.compile(r"^\s*([+-]?\d+)")


class ProviderErrorType(str, Enum):
    """Plaid error types handled as client-facing failures."""

    ITEM_ERROR = "ITEM_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_REQUEST = "INVALID_REQUEST"


RECOGNIZED_ERROR_TYPES = frozenset(t.value for t in ProviderErrorType)


class ProviderError(BaseModel):
    """Normalized provider error, serialized under the ``error`` key."""

    model_config = ConfigDict(frozen=True)

    error_code: str = Field(..., description="Provider error code")
    error_message: str = Field(default="", description="Human-readable message")

    def to_payload(self) -> dict[str, dict[str, str]]:
        """Return the wire shape ``{"error": {"error_code", "error_message"}}``."""
        return {"error": self.model_dump()}


class AccessCredential(BaseModel):
    """Durable credential for a linked account."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., repr=False)
    item_id: str | None = None


class TransactionQuery(BaseModel):
    """Pagination window for a transaction listing.

    Values are parsed permissively: the leading integer of a string is used
    and anything without one becomes zero. Negative values pass through.
    """

    model_config = ConfigDict(frozen=True)

    count: int = 0
    offset: int = 0

    @field_validator("count", "offset", mode="before")
    @classmethod
    def coerce_integer(cls, v: Any) -> int:
        """Coerce query-string values to integers without rejecting any."""
        if v is None or isinstance(v, bool):
            return 0
        if isinstance(v, int):
            return v
        if isinstance(v, float):
            return int(v)
        match = _INTEGER_PREFIX.match(str(v))
        return int(match.group(1)) if match else 0

    @classmethod
    def from_raw(cls, raw_offset: Any, raw_count: Any) -> "TransactionQuery":
        """Build a query from raw request values, either of which may be None."""
        return cls(offset=raw_offset, count=raw_count)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful provider outcome."""

    value: T


@dataclass(frozen=True)
class Fault:
    """Recognized provider failure."""

    error: ProviderError
    error_type: str = ProviderErrorType.INVALID_REQUEST.value

    @property
    def error_code(self) -> str:
        return self.error.error_code

    @property
    def error_message(self) -> str:
        return self.error.error_message

    @classmethod
    def of(cls, error_code: str, error_message: str, error_type: str) -> "Fault":
        return cls(
            error=ProviderError(error_code=error_code, error_message=error_message),
            error_type=error_type,
        )


ProviderResult = Ok[T] | Fault
