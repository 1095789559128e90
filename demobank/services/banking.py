"""Banking service: per-user account, transfer and history operations."""
import time
from typing import TYPE_CHECKING, Any, List

import structlog

from demobank import metrics
from demobank.errors import TransferError
from demobank.logging import log_transfer
from demobank.models import Account, Transfer, User

if TYPE_CHECKING:
    from demobank.state import Bank

logger = structlog.get_logger()


class BankingService:
    """
    Service for the operations an authenticated user performs.

    This service orchestrates:
    1. Listing the caller's own accounts
    2. Running transfers through the engine
    3. Collecting the caller's transfer history from the ledger
    4. Logging and metrics for each outcome
    """

    def __init__(self, bank: "Bank"):
        """
        Initialize the banking service.

        Args:
            bank: Bank state holding the store, ledger and engine
        """
        self.bank = bank

    def list_accounts(self, user: User) -> List[Account]:
        """Accounts owned by the user, in creation order."""
        accounts = self.bank.accounts.list_by_owner(user.id)
        logger.info("accounts_listed", user_id=user.id, account_count=len(accounts))
        return accounts

    def transfer(
        self,
        user: User,
        from_account_id: Any,
        to_account_id: Any,
        amount: Any,
    ) -> Transfer:
        """
        Execute a transfer on behalf of the user.

        Args:
            user: Authenticated user; must own the source account
            from_account_id: Source account id as submitted
            to_account_id: Destination account id as submitted
            amount: Amount as submitted

        Returns:
            The recorded Transfer

        Raises:
            TransferError: The transfer was rejected; nothing was changed
        """
        start_time = time.perf_counter()

        try:
            transfer = self.bank.engine.execute(
                user.id, from_account_id, to_account_id, amount
            )
        except TransferError as e:
            duration_seconds = time.perf_counter() - start_time
            logger.warning(
                "transfer_rejected",
                user_id=user.id,
                code=e.code,
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                amount=str(amount),
                duration_ms=round(duration_seconds * 1000, 2),
                outcome="rejected",
            )
            metrics.record_transfer_rejected(e.code, duration_seconds)
            raise

        duration_seconds = time.perf_counter() - start_time
        log_transfer(
            logger=logger,
            user_id=user.id,
            transfer_id=transfer.id,
            from_account_id=transfer.from_account_id,
            to_account_id=transfer.to_account_id,
            amount=transfer.amount,
            duration_ms=duration_seconds * 1000,
        )
        metrics.record_transfer(transfer.amount, duration_seconds)
        return transfer

    def transfer_history(self, user: User) -> List[Transfer]:
        """Transfers touching any account the user owns, oldest first."""
        with self.bank.accounts.locked():
            account_ids = [a.id for a in self.bank.accounts.list_by_owner(user.id)]
            transfers = self.bank.ledger.list_for_accounts(account_ids)

        logger.info(
            "transfer_history_listed",
            user_id=user.id,
            transfer_count=len(transfers),
        )
        return transfers
