"""Pydantic models describing ledger operation requests."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter

__all__ = [
    "AddAuthorityRequest",
    "BurnRequest",
    "GetBalanceRequest",
    "GetTotalSupplyRequest",
    "MintRequest",
    "OPERATION_ADAPTER",
    "OperationRequest",
    "RemoveAuthorityRequest",
    "TransferAdminRequest",
    "TransferRequest",
]

AccountId = Annotated[
    str,
    Field(min_length=1, description="Opaque account identifier."),
]


class _Request(BaseModel):
    """Immutable base for all operation requests."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class TransferAdminRequest(_Request):
    op: Literal["transferAdmin"] = "transferAdmin"
    new_admin: AccountId = Field(..., alias="newAdmin")


class AddAuthorityRequest(_Request):
    op: Literal["addAuthority"] = "addAuthority"
    new_auth: AccountId = Field(..., alias="newAuth")


class RemoveAuthorityRequest(_Request):
    op: Literal["removeAuthority"] = "removeAuthority"
    old_auth: AccountId = Field(..., alias="oldAuth")


class MintRequest(_Request):
    op: Literal["mint"] = "mint"
    recipient: AccountId
    amount: StrictInt = Field(
        ...,
        description="Tokens to create. Non-positive values are rejected by the ledger.",
    )


class BurnRequest(_Request):
    op: Literal["burn"] = "burn"
    amount: StrictInt


class TransferRequest(_Request):
    """Move tokens from the caller (or the declared ``sender``) to ``to``."""

    op: Literal["transfer"] = "transfer"
    to: AccountId
    amount: StrictInt
    sender: AccountId | None = Field(
        default=None,
        alias="from",
        description=(
            "Declared source account. Defaults to the authenticated caller; "
            "a mismatch is rejected unless sender enforcement is disabled."
        ),
    )


class GetBalanceRequest(_Request):
    op: Literal["getBalance"] = "getBalance"
    user: AccountId


class GetTotalSupplyRequest(_Request):
    op: Literal["getTotalSupply"] = "getTotalSupply"


OperationRequest = Annotated[
    TransferAdminRequest
    | AddAuthorityRequest
    | RemoveAuthorityRequest
    | MintRequest
    | BurnRequest
    | TransferRequest
    | GetBalanceRequest
    | GetTotalSupplyRequest,
    Field(discriminator="op"),
]

OPERATION_ADAPTER: TypeAdapter[OperationRequest] = TypeAdapter(OperationRequest)
