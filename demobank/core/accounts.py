"""In-memory account store keyed by account id."""
import threading
from contextlib import contextmanager
from dataclasses import replace
from decimal import Decimal, Inexact, localcontext
from typing import Dict, Iterable, Iterator, List, Optional

from demobank.models import Account


def exact_sum(balance: Decimal, delta: Decimal) -> Decimal:
    """balance + delta, raising decimal.Inexact instead of rounding."""
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        return balance + delta


class AccountStore:
    """
    Container for account records.

    The store does no business validation: it does not check categories,
    ownership or whether a balance may go negative. Lookups return copies
    so callers cannot change a balance except through apply_delta().

    The lock may be shared with the ledger so that a transfer's
    validate-mutate-append sequence runs as one critical section.
    """

    def __init__(
        self,
        accounts: Iterable[Account] = (),
        lock: Optional[threading.RLock] = None,
    ):
        self._lock = lock or threading.RLock()
        # dicts keep insertion order, which list_by_owner relies on
        self._accounts: Dict[int, Account] = {}
        for account in accounts:
            self.add(account)

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store lock for a multi-step read/write sequence."""
        with self._lock:
            yield

    def add(self, account: Account) -> None:
        """Insert a new account record."""
        with self._lock:
            if account.id in self._accounts:
                raise ValueError(f"Account {account.id} already exists")
            self._accounts[account.id] = replace(account)

    def find_by_id(self, account_id: int) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            return replace(account) if account else None

    def list_by_owner(self, user_id: int) -> List[Account]:
        with self._lock:
            return [
                replace(account)
                for account in self._accounts.values()
                if account.owner_id == user_id
            ]

    def apply_delta(self, account_id: int, amount: Decimal) -> None:
        """
        Adjust an account balance by a signed amount.

        The caller guarantees the account exists and, for debits, that the
        balance was already checked. A result that would need rounding
        raises decimal.Inexact and leaves the balance unchanged.
        """
        with self._lock:
            account = self._accounts[account_id]
            account.balance = exact_sum(account.balance, amount)

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)
