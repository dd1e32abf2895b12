"""Property-based checks of ledger invariants using hypothesis."""

from __future__ import annotations

from hypothesis import HealthCheck, given, settings, strategies as st
from hypothesis.stateful import (
    RuleBasedStateMachine,
    invariant,
    precondition,
    rule,
)

from water_credit.errors import LedgerError
from water_credit.ledger import TokenLedger
from water_credit.results import Err

ADMIN = "admin"
ACCOUNTS = ("admin", "mint-a", "mint-b", "alice", "bob", "carol")

accounts = st.sampled_from(ACCOUNTS)
amounts = st.integers(min_value=-5, max_value=300)


class LedgerMachine(RuleBasedStateMachine):
    """Drive random operation sequences and check every reachable state."""

    def __init__(self) -> None:
        super().__init__()
        self.ledger = TokenLedger(ADMIN)
        self.failures = 0

    def _apply(self, operation, *args):
        before = self.ledger.snapshot()
        result = operation(*args)
        if isinstance(result, Err):
            self.failures += 1
            assert self.ledger.snapshot() == before, (
                f"{operation.__name__}{args} failed with {result.error.name} "
                "but mutated state"
            )
        return result

    @rule(caller=accounts, new_admin=accounts)
    def transfer_admin(self, caller: str, new_admin: str) -> None:
        expected_ok = caller == self.ledger.admin
        result = self._apply(self.ledger.transfer_admin, caller, new_admin)
        assert result.is_ok == expected_ok

    @rule(caller=accounts, account=accounts)
    def add_authority(self, caller: str, account: str) -> None:
        self._apply(self.ledger.add_authority, caller, account)

    @rule(caller=accounts, account=accounts)
    def remove_authority(self, caller: str, account: str) -> None:
        self._apply(self.ledger.remove_authority, caller, account)

    @rule(caller=accounts, recipient=accounts, amount=amounts)
    def mint(self, caller: str, recipient: str, amount: int) -> None:
        was_authority = self.ledger.is_authority(caller)
        supply = self.ledger.get_total_supply()
        self._apply(self.ledger.mint, caller, recipient, amount)
        if not was_authority or amount < 1:
            assert self.ledger.get_total_supply() == supply
        else:
            assert self.ledger.get_total_supply() == supply + amount

    @rule(caller=accounts, amount=amounts)
    def burn(self, caller: str, amount: int) -> None:
        self._apply(self.ledger.burn, caller, amount)

    @rule(sender=accounts, recipient=accounts, amount=amounts)
    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        supply = self.ledger.get_total_supply()
        before = self.ledger.snapshot()
        result = self.ledger.transfer(sender, recipient, amount)
        if sender == recipient:
            assert result == Err(LedgerError.SELF_TRANSFER_REJECTED)
        assert self.ledger.get_total_supply() == supply
        if isinstance(result, Err):
            assert self.ledger.snapshot() == before

    @precondition(lambda self: self.ledger.get_total_supply() > 0)
    @rule(account=accounts)
    def burn_everything(self, account: str) -> None:
        balance = self.ledger.get_balance(account)
        if balance:
            assert self.ledger.burn(account, balance).is_ok
            assert self.ledger.get_balance(account) == 0

    @invariant()
    def supply_equals_sum_of_balances(self) -> None:
        snapshot = self.ledger.snapshot()
        assert snapshot.total_supply == sum(snapshot.balances.values())

    @invariant()
    def balances_are_non_negative(self) -> None:
        assert all(value >= 0 for value in self.ledger.snapshot().balances.values())


LedgerMachine.TestCase.settings = settings(
    max_examples=75,
    stateful_step_count=40,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
TestLedgerStateMachine = LedgerMachine.TestCase


@given(caller=accounts, account=accounts)
def test_only_admin_manages_authorities(caller: str, account: str) -> None:
    ledger = TokenLedger(ADMIN)
    added = ledger.add_authority(caller, account)
    assert added.is_ok == (caller == ADMIN)
    if caller != ADMIN:
        assert added == Err(LedgerError.UNAUTHORIZED)
        assert ledger.remove_authority(caller, account) == Err(
            LedgerError.UNAUTHORIZED
        )


@given(
    authorities=st.frozensets(accounts, max_size=3),
    caller=accounts,
    amount=st.integers(min_value=1, max_value=10**30),
)
def test_mint_succeeds_iff_caller_is_authority(
    authorities: frozenset[str], caller: str, amount: int
) -> None:
    ledger = TokenLedger(ADMIN, authorities=authorities)
    result = ledger.mint(caller, "alice", amount)
    assert result.is_ok == (caller in authorities)


@given(
    balance=st.integers(min_value=0, max_value=1_000),
    amount=st.integers(min_value=1, max_value=2_000),
)
def test_transfer_and_burn_never_overdraw(balance: int, amount: int) -> None:
    ledger = TokenLedger(ADMIN, authorities=["mint-a"])
    if balance:
        ledger.mint("mint-a", "alice", balance).unwrap()

    transferred = ledger.transfer("alice", "bob", amount)
    if amount > balance:
        assert transferred == Err(LedgerError.INSUFFICIENT_BALANCE)
        assert ledger.burn("alice", amount) == Err(LedgerError.INSUFFICIENT_BALANCE)
        assert ledger.get_balance("alice") == balance
    else:
        assert transferred.is_ok
        assert ledger.get_balance("alice") == balance - amount
        assert ledger.get_balance("bob") == amount
    assert ledger.get_total_supply() == balance
