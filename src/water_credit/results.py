"""Tagged success/failure values returned by ledger operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from water_credit.errors import LedgerError, LedgerFailure

__all__ = ["Err", "Ok", "Result"]

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying the operation's value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def to_wire(self) -> dict[str, object]:
        """Render as ``{"value": ...}``."""

        return {"value": self.value}


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome carrying the :class:`LedgerError` that caused it."""

    error: LedgerError

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return self.error.description

    def unwrap(self) -> object:
        """Raise :class:`LedgerFailure` for callers that prefer exceptions.

        Raises:
            LedgerFailure: Always.
        """

        raise LedgerFailure(self.error)

    def to_wire(self) -> dict[str, object]:
        """Render as ``{"error": <code>}``; self-transfer renders ``False``."""

        return {"error": self.error.wire_value}


Result = Ok[T] | Err
