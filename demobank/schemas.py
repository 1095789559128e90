"""Pydantic schemas for request/response validation."""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer


def _money_to_json(value: Decimal) -> Union[int, float]:
    """Whole amounts as ints, cent amounts as floats."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Decimal amounts are emitted as JSON numbers. Amounts carry at most two
# decimal places, so floats stay exact to the cent up to ~15 digits.
Money = Annotated[
    Decimal,
    PlainSerializer(_money_to_json, return_type=Union[int, float], when_used="json"),
]


class LoginRequest(BaseModel):
    """
    Request body for POST /api/login.

    Fields are left untyped so that any malformed credential pair is
    rejected by the identity provider as 401, not as a schema error.
    """
    username: Optional[Any] = Field(None, description="Case-sensitive username")
    password: Optional[Any] = Field(None, description="Opaque credential")


class UserResponse(BaseModel):
    """Response body for POST /api/login and GET /api/me."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(..., alias="userId")
    username: str
    name: str


class AccountResponse(BaseModel):
    """Single item in GET /api/accounts."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(..., alias="accountId")
    owner_id: int = Field(..., alias="ownerId")
    category: str
    balance: Money


class TransferRequest(BaseModel):
    """
    Request body for POST /api/transfer.

    Fields are left untyped so that parsing errors are reported by the
    transfer engine as INVALID_INPUT instead of a schema error.
    """
    model_config = ConfigDict(populate_by_name=True)

    from_account_id: Optional[Any] = Field(None, alias="fromAccountId")
    to_account_id: Optional[Any] = Field(None, alias="toAccountId")
    amount: Optional[Any] = None


class TransferSchema(BaseModel):
    """A ledger entry as returned to callers."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    from_account_id: int = Field(..., alias="fromAccountId")
    to_account_id: int = Field(..., alias="toAccountId")
    amount: Money
    timestamp: datetime


class TransferResponse(BaseModel):
    """Response body for POST /api/transfer."""
    status: Literal["SUCCESS"] = "SUCCESS"
    transfer: TransferSchema


class LogoutResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    """Body returned for every 4xx error."""
    error: str
    code: str


UNAUTHENTICATED_RESPONSES = {401: {"model": ErrorResponse, "description": "No valid session"}}

TRANSFER_ERROR_RESPONSES = {
    **UNAUTHENTICATED_RESPONSES,
    400: {"model": ErrorResponse, "description": "Transfer rejected"},
}
