"""In-memory records for users, accounts and transfers."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class AccountCategory(str, Enum):
    """Known account categories. Accounts may carry any category string."""
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"


@dataclass(frozen=True)
class User:
    """An identity record. Seeded at startup and never modified."""
    id: int
    username: str
    name: str
    credential: str = field(repr=False)


@dataclass
class Account:
    """A balance-holding record owned by exactly one user."""
    id: int
    owner_id: int
    category: str
    balance: Decimal


@dataclass(frozen=True)
class Transfer:
    """A completed balance movement, as stored in the ledger."""
    id: int
    from_account_id: int
    to_account_id: int
    amount: Decimal
    timestamp: datetime
