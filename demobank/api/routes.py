"""API route handlers for the Demo Bank service."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from demobank import metrics
from demobank.errors import AuthenticationFailed
from demobank.logging import get_logger, set_user_context
from demobank.models import User
from demobank.schemas import (
    AccountResponse,
    ErrorResponse,
    LoginRequest,
    LogoutResponse,
    TRANSFER_ERROR_RESPONSES,
    TransferRequest,
    TransferResponse,
    TransferSchema,
    UNAUTHENTICATED_RESPONSES,
    UserResponse,
)
from demobank.services.banking import BankingService
from demobank.services.identity import SESSION_USER_KEY
from demobank.state import Bank, get_bank

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["bank"])


def get_current_user(request: Request, bank: Bank = Depends(get_bank)) -> User:
    """Dependency resolving the session's user; raises Unauthenticated."""
    user = bank.identity.current_user(request.session)
    set_user_context(user.id)
    return user


@router.post(
    "/login",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
def login(
    request: Request,
    body: Optional[LoginRequest] = None,
    bank: Bank = Depends(get_bank),
):
    """Check credentials and bind the user to the session."""
    body = body or LoginRequest()
    try:
        user = bank.identity.login(body.username, body.password)
    except AuthenticationFailed:
        logger.warning("login_failed", username=body.username, outcome="failed")
        metrics.record_login(success=False)
        raise

    bank.identity.sign_in(request.session, user)
    set_user_context(user.id)
    logger.info("login_succeeded", user_id=user.id, outcome="success")
    metrics.record_login(success=True)

    return UserResponse.model_validate(user)


@router.post("/logout", response_model=LogoutResponse)
def logout(request: Request, bank: Bank = Depends(get_bank)):
    """Clear the session. Succeeds whether or not anyone was signed in."""
    user_id = request.session.get(SESSION_USER_KEY)
    bank.identity.logout(request.session)
    logger.info("logout", user_id=user_id)
    return LogoutResponse()


@router.get("/me", response_model=UserResponse, responses=UNAUTHENTICATED_RESPONSES)
def me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)


@router.get(
    "/accounts",
    response_model=List[AccountResponse],
    responses=UNAUTHENTICATED_RESPONSES,
)
def list_accounts(
    user: User = Depends(get_current_user),
    bank: Bank = Depends(get_bank),
):
    """List the caller's own accounts."""
    accounts = BankingService(bank).list_accounts(user)
    return [AccountResponse.model_validate(a) for a in accounts]


@router.post(
    "/transfer",
    response_model=TransferResponse,
    responses=TRANSFER_ERROR_RESPONSES,
)
def create_transfer(
    body: TransferRequest,
    user: User = Depends(get_current_user),
    bank: Bank = Depends(get_bank),
):
    """
    Move money from one of the caller's accounts to any existing account.

    Validation failures are raised as TransferError and rendered as 400
    responses carrying the error code.
    """
    transfer = BankingService(bank).transfer(
        user,
        from_account_id=body.from_account_id,
        to_account_id=body.to_account_id,
        amount=body.amount,
    )
    return TransferResponse(transfer=TransferSchema.model_validate(transfer))


@router.get(
    "/transfers",
    response_model=List[TransferSchema],
    responses=UNAUTHENTICATED_RESPONSES,
)
def list_transfers(
    user: User = Depends(get_current_user),
    bank: Bank = Depends(get_bank),
):
    """Transfers touching any of the caller's accounts, oldest first."""
    transfers = BankingService(bank).transfer_history(user)
    return [TransferSchema.model_validate(t) for t in transfers]
