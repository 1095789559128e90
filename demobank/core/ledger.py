"""Append-only ledger of completed transfers."""
import threading
from datetime import datetime
from decimal import Decimal
from typing import Collection, List, Optional

from demobank.models import Transfer


class Ledger:
    """
    Chronological record of executed transfers.

    Ids start at 1 and increase by one per append for the lifetime of the
    ledger. Entries are never edited or removed.
    """

    def __init__(self, lock: Optional[threading.RLock] = None):
        self._lock = lock or threading.RLock()
        self._transfers: List[Transfer] = []
        self._last_id = 0

    def append(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        timestamp: datetime,
    ) -> Transfer:
        """Store a transfer and return it with its assigned id."""
        with self._lock:
            self._last_id += 1
            transfer = Transfer(
                id=self._last_id,
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                amount=amount,
                timestamp=timestamp,
            )
            self._transfers.append(transfer)
            return transfer

    def list_for_accounts(self, account_ids: Collection[int]) -> List[Transfer]:
        """Transfers touching any of the given accounts, in append order."""
        ids = set(account_ids)
        with self._lock:
            return [
                t for t in self._transfers
                if t.from_account_id in ids or t.to_account_id in ids
            ]

    def list_all(self) -> List[Transfer]:
        with self._lock:
            return list(self._transfers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._transfers)
