"""Balance-accounting state machine for the water credit token.

The ledger keeps four pieces of state: the administrator, the set of minting
authorities, the balance table and the total supply. Every mutating operation
validates all of its preconditions before touching state, so a failed call
never leaves a partial update behind, and ``total_supply`` always equals the
sum of the balance table.

Operations return :class:`~water_credit.results.Ok` or
:class:`~water_credit.results.Err` values instead of raising. The ledger is not
thread-safe; the hosting process must serialise calls against one instance.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TypeGuard

from water_credit.errors import LedgerError
from water_credit.results import Err, Ok, Result

__all__ = ["LedgerSnapshot", "LedgerState", "TokenLedger"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class LedgerState:
    """Mutable ledger state owned by exactly one :class:`TokenLedger`.

    Attributes:
        admin: Identity allowed to manage authorities and hand over the role.
        authorities: Identities allowed to mint.
        balances: Account balances. Missing accounts hold zero.
        total_supply: Sum of all balances.
    """

    admin: str
    authorities: set[str] = field(default_factory=set)
    balances: dict[str, int] = field(default_factory=dict)
    total_supply: int = 0


@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """Immutable copy of a :class:`LedgerState` that compares by value."""

    admin: str
    authorities: frozenset[str]
    balances: Mapping[str, int]
    total_supply: int

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LedgerSnapshot):
            return NotImplemented
        return (
            self.admin == other.admin
            and self.authorities == other.authorities
            and dict(self.balances) == dict(other.balances)
            and self.total_supply == other.total_supply
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.admin,
                self.authorities,
                frozenset(self.balances.items()),
                self.total_supply,
            )
        )


class TokenLedger:
    """Admin-controlled authority list plus per-account token balances."""

    def __init__(
        self,
        admin: str,
        *,
        authorities: Iterable[str] = (),
        max_amount: int | None = None,
    ) -> None:
        """Initialise an empty ledger.

        Args:
            admin: Identity of the initial administrator.
            authorities: Optional genesis minting authorities.
            max_amount: Optional ceiling applied to every single
                mint/burn/transfer amount. ``None`` means unbounded.

        Raises:
            ValueError: If ``admin`` is empty or ``max_amount`` is not a
                positive integer.
        """

        if not admin:
            raise ValueError("A ledger requires a non-empty admin identity.")
        if max_amount is not None and (
            not _is_integer(max_amount) or max_amount < 1
        ):
            raise ValueError("max_amount must be a positive integer or None.")
        self._state = LedgerState(admin=admin, authorities=set(authorities))
        self._max_amount = max_amount

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def admin(self) -> str:
        return self._state.admin

    @property
    def authorities(self) -> frozenset[str]:
        return frozenset(self._state.authorities)

    @property
    def max_amount(self) -> int | None:
        return self._max_amount

    def is_admin(self, account: str) -> bool:
        return account == self._state.admin

    def is_authority(self, account: str) -> bool:
        return account in self._state.authorities

    def get_balance(self, user: str) -> int:
        """Return the balance of ``user``; unknown accounts hold zero."""

        return self._state.balances.get(user, 0)

    def get_total_supply(self) -> int:
        return self._state.total_supply

    def snapshot(self) -> LedgerSnapshot:
        """Return an immutable copy of the current state."""

        state = self._state
        return LedgerSnapshot(
            admin=state.admin,
            authorities=frozenset(state.authorities),
            balances=MappingProxyType(dict(state.balances)),
            total_supply=state.total_supply,
        )

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def transfer_admin(self, caller: str, new_admin: str) -> Result[bool]:
        """Hand the admin role to ``new_admin``.

        No check is made that ``new_admin`` differs from the current admin.
        """

        if not self.is_admin(caller):
            return self._reject("transfer_admin", caller, LedgerError.UNAUTHORIZED)
        previous = self._state.admin
        self._state.admin = new_admin
        LOGGER.info(
            "Admin role transferred",
            extra={"previous_admin": previous, "new_admin": new_admin},
        )
        return Ok(True)

    def add_authority(self, caller: str, new_auth: str) -> Result[bool]:
        if not self.is_admin(caller):
            return self._reject("add_authority", caller, LedgerError.UNAUTHORIZED)
        if new_auth in self._state.authorities:
            return self._reject(
                "add_authority", caller, LedgerError.ALREADY_AUTHORITY
            )
        self._state.authorities.add(new_auth)
        LOGGER.info("Authority added", extra={"authority": new_auth})
        return Ok(True)

    def remove_authority(self, caller: str, old_auth: str) -> Result[bool]:
        if not self.is_admin(caller):
            return self._reject("remove_authority", caller, LedgerError.UNAUTHORIZED)
        if old_auth not in self._state.authorities:
            return self._reject(
                "remove_authority", caller, LedgerError.NOT_AUTHORITY
            )
        self._state.authorities.discard(old_auth)
        LOGGER.info("Authority removed", extra={"authority": old_auth})
        return Ok(True)

    # ------------------------------------------------------------------
    # Supply changes
    # ------------------------------------------------------------------

    def mint(self, caller: str, recipient: str, amount: int) -> Result[bool]:
        """Create ``amount`` tokens and credit them to ``recipient``.

        Only members of the authority set may mint; being admin is not enough.
        """

        if not self.is_authority(caller):
            return self._reject("mint", caller, LedgerError.UNAUTHORIZED)
        if not self._valid_amount(amount):
            return self._reject("mint", caller, LedgerError.INVALID_AMOUNT)

        balances = self._state.balances
        balances[recipient] = balances.get(recipient, 0) + amount
        self._state.total_supply += amount
        LOGGER.debug(
            "Minted %s to %s",
            amount,
            recipient,
            extra={"authority": caller, "total_supply": self._state.total_supply},
        )
        return Ok(True)

    def burn(self, caller: str, amount: int) -> Result[bool]:
        """Destroy ``amount`` tokens from the caller's own balance."""

        if not self._valid_amount(amount):
            return self._reject("burn", caller, LedgerError.INVALID_AMOUNT)
        balance = self.get_balance(caller)
        if balance < amount:
            return self._reject("burn", caller, LedgerError.INSUFFICIENT_BALANCE)

        self._state.balances[caller] = balance - amount
        self._state.total_supply -= amount
        LOGGER.debug(
            "Burned %s from %s",
            amount,
            caller,
            extra={"total_supply": self._state.total_supply},
        )
        return Ok(True)

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def transfer(self, sender: str, recipient: str, amount: int) -> Result[bool]:
        """Move ``amount`` from ``sender`` to ``recipient``.

        The ledger trusts that ``sender`` is the authenticated caller; see
        :class:`~water_credit.dispatch.LedgerDispatcher` for the check.
        Self-transfers are rejected before the amount is looked at.
        """

        if sender == recipient:
            return self._reject(
                "transfer", sender, LedgerError.SELF_TRANSFER_REJECTED
            )
        if not self._valid_amount(amount):
            return self._reject("transfer", sender, LedgerError.INVALID_AMOUNT)
        sender_balance = self.get_balance(sender)
        if sender_balance < amount:
            return self._reject(
                "transfer", sender, LedgerError.INSUFFICIENT_BALANCE
            )

        balances = self._state.balances
        balances[sender] = sender_balance - amount
        balances[recipient] = balances.get(recipient, 0) + amount
        LOGGER.debug("Transferred %s from %s to %s", amount, sender, recipient)
        return Ok(True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _valid_amount(self, amount: object) -> bool:
        if not _is_integer(amount) or amount < 1:
            return False
        return self._max_amount is None or amount <= self._max_amount

    @staticmethod
    def _reject(operation: str, caller: str, error: LedgerError) -> Err:
        LOGGER.debug(
            "Rejected %s from %s: %s",
            operation,
            caller,
            error.name,
            extra={"error_code": error.wire_value},
        )
        return Err(error)


def _is_integer(value: object) -> TypeGuard[int]:
    # bool is an int subclass but never a valid token amount
    return isinstance(value, int) and not isinstance(value, bool)
