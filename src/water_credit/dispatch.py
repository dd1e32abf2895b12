"""Route authenticated operation requests to a :class:`TokenLedger`.

The dispatcher stands in for the execution environment that hosts the ledger:
it receives an already-authenticated caller identity together with a request,
validates the request shape and calls exactly one ledger operation. It is the
place where the transfer sender is tied to the caller, a check the ledger core
deliberately leaves to its host.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from pydantic import ValidationError

from water_credit.errors import LedgerError
from water_credit.ledger import TokenLedger
from water_credit.results import Err, Ok, Result
from water_credit.schemas import (
    OPERATION_ADAPTER,
    AddAuthorityRequest,
    BurnRequest,
    GetBalanceRequest,
    GetTotalSupplyRequest,
    MintRequest,
    OperationRequest,
    RemoveAuthorityRequest,
    TransferAdminRequest,
    TransferRequest,
)

__all__ = ["LedgerDispatcher", "parse_request"]

LOGGER = logging.getLogger(__name__)


def parse_request(payload: Mapping[str, object]) -> OperationRequest:
    """Validate a raw request mapping.

    Args:
        payload: Mapping with an ``op`` key and the operation's fields.

    Returns:
        The matching request model.

    Raises:
        ValueError: If the payload does not describe a valid operation.
    """

    try:
        return OPERATION_ADAPTER.validate_python(dict(payload))
    except ValidationError as exc:
        raise ValueError(f"Invalid operation request: {exc}") from exc


class LedgerDispatcher:
    """Serially apply caller-scoped requests to one ledger."""

    def __init__(
        self, ledger: TokenLedger, *, enforce_sender_match: bool = True
    ) -> None:
        self.ledger = ledger
        self.enforce_sender_match = enforce_sender_match

    def dispatch(
        self,
        caller: str,
        request: OperationRequest | Mapping[str, object],
    ) -> Result[object]:
        """Apply ``request`` on behalf of ``caller``.

        Raises:
            ValueError: If ``request`` is a mapping that fails validation or
                ``caller`` is empty.
        """

        if not caller:
            raise ValueError("An authenticated caller identity is required.")
        if isinstance(request, Mapping):
            request = parse_request(request)

        result = self._apply(caller, request)
        if isinstance(result, Err):
            LOGGER.info(
                "Operation %s by %s failed: %s",
                request.op,
                caller,
                result.error.name,
                extra={"error_code": result.error.wire_value},
            )
        else:
            LOGGER.debug("Operation %s by %s succeeded", request.op, caller)
        return result

    def dispatch_batch(
        self, entries: Iterable[Mapping[str, object]]
    ) -> list[Result[object]]:
        """Dispatch ``{"caller": ..., "op": ..., ...}`` entries in order.

        Raises:
            ValueError: On the first entry without a caller or with an invalid
                request; earlier entries stay applied.
        """

        results: list[Result[object]] = []
        for index, entry in enumerate(entries):
            payload = dict(entry)
            caller = payload.pop("caller", None)
            if not isinstance(caller, str) or not caller:
                raise ValueError(f"Entry {index} is missing a 'caller' string.")
            try:
                results.append(self.dispatch(caller, payload))
            except ValueError as exc:
                raise ValueError(f"Entry {index}: {exc}") from exc
        return results

    def _apply(self, caller: str, request: OperationRequest) -> Result[object]:
        ledger = self.ledger
        if isinstance(request, TransferAdminRequest):
            return ledger.transfer_admin(caller, request.new_admin)
        if isinstance(request, AddAuthorityRequest):
            return ledger.add_authority(caller, request.new_auth)
        if isinstance(request, RemoveAuthorityRequest):
            return ledger.remove_authority(caller, request.old_auth)
        if isinstance(request, MintRequest):
            return ledger.mint(caller, request.recipient, request.amount)
        if isinstance(request, BurnRequest):
            return ledger.burn(caller, request.amount)
        if isinstance(request, TransferRequest):
            return self._transfer(caller, request.sender, request.to, request.amount)
        if isinstance(request, GetBalanceRequest):
            return Ok(ledger.get_balance(request.user))
        if isinstance(request, GetTotalSupplyRequest):
            return Ok(ledger.get_total_supply())
        raise TypeError(f"Unsupported request type: {type(request).__name__}")

    def _transfer(
        self, caller: str, sender: str | None, to: str, amount: int
    ) -> Result[object]:
        if sender is None:
            sender = caller
        elif sender != caller and self.enforce_sender_match:
            LOGGER.warning(
                "Rejected transfer from %s requested by %s",
                sender,
                caller,
                extra={"error_code": LedgerError.UNAUTHORIZED.wire_value},
            )
            return Err(LedgerError.UNAUTHORIZED)
        return self.ledger.transfer(sender, to, amount)
