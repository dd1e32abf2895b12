"""Water Credit - admin-controlled fungible token ledger."""

from __future__ import annotations

from importlib import import_module
from typing import Any, TYPE_CHECKING

__all__ = [
    "Err",
    "LedgerDispatcher",
    "LedgerError",
    "LedgerFailure",
    "LedgerSnapshot",
    "Ok",
    "TokenLedger",
    "load_config",
]

if TYPE_CHECKING:
    from .config_loader import load_config
    from .dispatch import LedgerDispatcher
    from .errors import LedgerError, LedgerFailure
    from .ledger import LedgerSnapshot, TokenLedger
    from .results import Err, Ok


def __getattr__(name: str) -> Any:
    """Lazily import submodules so the core does not load pydantic."""

    module_map = {
        "Err": "results",
        "Ok": "results",
        "LedgerDispatcher": "dispatch",
        "LedgerError": "errors",
        "LedgerFailure": "errors",
        "LedgerSnapshot": "ledger",
        "TokenLedger": "ledger",
        "load_config": "config_loader",
    }

    if name not in module_map:
        raise AttributeError(name)

    module = import_module(f".{module_map[name]}", __name__)
    return getattr(module, name)
