"""In-process bank state and the FastAPI dependency that provides it."""
import threading
from decimal import Decimal
from typing import Iterable

from demobank.config import settings
from demobank.core import AccountStore, Ledger, TransferEngine
from demobank.models import Account, AccountCategory, User
from demobank.services.identity import IdentityProvider

DEMO_USERS = (
    User(id=1, username="alice", name="Alice Doe", credential="password123"),
    User(id=2, username="bob", name="Bob Smith", credential="password123"),
)

DEMO_ACCOUNTS = (
    Account(id=1001, owner_id=1, category=AccountCategory.CHECKING.value, balance=Decimal("1000")),
    Account(id=1002, owner_id=1, category=AccountCategory.SAVINGS.value, balance=Decimal("5000")),
    Account(id=2001, owner_id=2, category=AccountCategory.CHECKING.value, balance=Decimal("750")),
)


class Bank:
    """
    All state for one bank instance.

    The account store and ledger share a single lock so that transfers and
    reads see balances and ledger entries change together.
    """

    def __init__(self, users: Iterable[User] = (), accounts: Iterable[Account] = ()):
        self.lock = threading.RLock()
        self.accounts = AccountStore(accounts, lock=self.lock)
        self.ledger = Ledger(lock=self.lock)
        self.identity = IdentityProvider(users)
        self.engine = TransferEngine(self.accounts, self.ledger)


def create_demo_bank() -> Bank:
    """A bank seeded with the alice/bob demo users and accounts."""
    return Bank(users=DEMO_USERS, accounts=DEMO_ACCOUNTS)


bank = create_demo_bank() if settings.seed_demo_data else Bank()


def get_bank() -> Bank:
    """Dependency that provides the process-wide bank state."""
    return bank
