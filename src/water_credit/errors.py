"""Error taxonomy shared by the ledger core and its callers."""

from __future__ import annotations

from enum import IntEnum

__all__ = ["LedgerError", "LedgerFailure"]


class LedgerError(IntEnum):
    """Failure codes returned by :class:`~water_credit.ledger.TokenLedger`.

    The numeric values are the codes existing callers match on and must not be
    renumbered. ``SELF_TRANSFER_REJECTED`` has no numeric code of its own; it
    renders as ``False`` on the wire (see :attr:`wire_value`).
    """

    SELF_TRANSFER_REJECTED = 0
    UNAUTHORIZED = 100
    INSUFFICIENT_BALANCE = 101
    ALREADY_AUTHORITY = 102
    NOT_AUTHORITY = 103
    INVALID_AMOUNT = 105

    @property
    def wire_value(self) -> int | bool:
        """Return the value placed in the ``error`` slot of a wire result."""

        if self is LedgerError.SELF_TRANSFER_REJECTED:
            return False
        return int(self)

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[LedgerError, str] = {
    LedgerError.SELF_TRANSFER_REJECTED: "sender and recipient must differ",
    LedgerError.UNAUTHORIZED: "caller is not permitted to perform this operation",
    LedgerError.INSUFFICIENT_BALANCE: "balance is lower than the requested amount",
    LedgerError.ALREADY_AUTHORITY: "account is already a minting authority",
    LedgerError.NOT_AUTHORITY: "account is not a minting authority",
    LedgerError.INVALID_AMOUNT: "amount must be a positive integer",
}


class LedgerFailure(RuntimeError):
    """Raised when a caller unwraps a failed ledger result."""

    def __init__(self, error: LedgerError) -> None:
        super().__init__(f"{error.name} ({error.wire_value}): {error.description}")
        self.error = error
