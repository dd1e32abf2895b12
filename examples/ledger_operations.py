#!/usr/bin/env python3
"""
Ledger Operations Example

This example demonstrates:
- Installing a minting authority
- Minting, transferring and burning credits
- Inspecting rejected operations and their error codes
- Driving the ledger through the request dispatcher
"""

import json

from water_credit.dispatch import LedgerDispatcher
from water_credit.ledger import TokenLedger

ADMIN = "ST1ADMIN11111111111111111111111111111111"
UTILITY = "ST2AUTH22222222222222222222222222222222"
FARM_A = "ST3USERAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
FARM_B = "ST4USERBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBB"


def direct_calls():
    """Call the ledger methods directly."""
    print("Direct ledger calls")
    ledger = TokenLedger(ADMIN)

    steps = [
        ("add authority", ledger.add_authority(ADMIN, UTILITY)),
        ("mint 100 to farm A", ledger.mint(UTILITY, FARM_A, 100)),
        ("farm A sends 60 to farm B", ledger.transfer(FARM_A, FARM_B, 60)),
        ("farm B burns 30", ledger.burn(FARM_B, 30)),
        ("farm A mints (not an authority)", ledger.mint(FARM_A, FARM_A, 10)),
        ("farm A sends to itself", ledger.transfer(FARM_A, FARM_A, 5)),
        ("farm B overdraws", ledger.transfer(FARM_B, FARM_A, 1_000)),
    ]
    for label, result in steps:
        print(f"  {label:<34} -> {result.to_wire()}")

    snapshot = ledger.snapshot()
    print(f"  balances: {dict(snapshot.balances)}")
    print(f"  total supply: {snapshot.total_supply}")
    return ledger


def dispatched_batch():
    """Replay a batch of caller-scoped requests."""
    print("\nDispatched batch")
    dispatcher = LedgerDispatcher(TokenLedger(ADMIN))
    batch = [
        {"caller": ADMIN, "op": "addAuthority", "newAuth": UTILITY},
        {"caller": UTILITY, "op": "mint", "recipient": FARM_A, "amount": 80},
        {"caller": FARM_A, "op": "transfer", "to": FARM_B, "amount": 20},
        # Declared sender differs from the authenticated caller
        {"caller": FARM_B, "op": "transfer", "from": FARM_A, "to": FARM_B, "amount": 5},
        {"caller": FARM_A, "op": "getBalance", "user": FARM_A},
        {"caller": FARM_A, "op": "getTotalSupply"},
    ]
    results = dispatcher.dispatch_batch(batch)
    print(json.dumps([result.to_wire() for result in results], indent=2))


def main():
    """Run all examples."""
    direct_calls()
    dispatched_batch()


if __name__ == "__main__":
    main()
