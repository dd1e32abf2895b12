"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator

import pytest

# Ensure src/ is on sys.path for tests so the src layout is used during test runs
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from water_credit.ledger import TokenLedger  # noqa: E402

ADMIN = "ST1ADMIN11111111111111111111111111111111"
AUTH = "ST2AUTH22222222222222222222222222222222"
USER_A = "ST3USERAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
USER_B = "ST4USERBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBB"

_ENV_VARS = (
    "WATER_CREDIT_ADMIN",
    "WATER_CREDIT_AUTHORITIES",
    "WATER_CREDIT_MAX_AMOUNT",
    "WATER_CREDIT_ENFORCE_SENDER",
    "WATER_CREDIT_LOG_LEVEL",
    "WATER_CREDIT_CONFIG",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host environment variables out of settings-driven tests."""

    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def ledger() -> TokenLedger:
    """Fresh ledger administered by ``ADMIN`` with no authorities."""

    return TokenLedger(ADMIN)


@pytest.fixture
def funded_ledger() -> TokenLedger:
    """Ledger where ``AUTH`` is an authority and ``USER_A`` holds 100."""

    ledger = TokenLedger(ADMIN)
    ledger.add_authority(ADMIN, AUTH).unwrap()
    ledger.mint(AUTH, USER_A, 100).unwrap()
    return ledger
