"""
Transfer Engine

Validates and executes a balance movement between two accounts and records
it in the ledger.

VALIDATION ORDER:
-----------------
Checks run in a fixed order and the first failure is reported, so a request
with several problems always produces the same error:

1. Amount present, numeric, finite, greater than zero and
   at most two decimal places                              -> InvalidInput
2. Both account ids present and integer-like               -> InvalidInput
3. Source exists and belongs to the acting user            -> SourceAccountUnauthorized
4. Destination exists (any owner)                          -> DestinationAccountNotFound
5. Source balance covers the amount                        -> InsufficientFunds

Steps 3-5 and the execution run under the store lock, which the ledger
shares. Nothing is mutated until every check has passed, so a rejected
transfer leaves balances and the ledger untouched. Balance arithmetic is
exact: a debit or credit whose result cannot be represented without
rounding is rejected as InvalidInput before either balance changes.
"""
from datetime import datetime, timezone
from decimal import Decimal, Inexact, InvalidOperation
from typing import Any, Callable, Optional

from demobank.core.accounts import AccountStore, exact_sum
from demobank.core.ledger import Ledger
from demobank.errors import (
    DestinationAccountNotFound,
    InsufficientFunds,
    InvalidInput,
    SourceAccountUnauthorized,
)
from demobank.models import Transfer

# Smallest unit an amount may carry
CENT = Decimal("0.01")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(raw: Any) -> Decimal:
    """
    Convert a submitted amount to a positive Decimal.

    Accepts ints, floats, Decimals and numeric strings. Booleans, blanks,
    NaN/Infinity, values <= 0 and values finer than a cent are rejected.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidInput()

    if isinstance(raw, float):
        # str() keeps 0.1 as 0.1 rather than its binary expansion
        raw = str(raw)

    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            raise InvalidInput()

    if not isinstance(raw, (int, str, Decimal)):
        raise InvalidInput()

    try:
        amount = Decimal(raw)
    except (InvalidOperation, ValueError):
        raise InvalidInput()

    if not amount.is_finite() or amount <= 0:
        raise InvalidInput()

    try:
        if amount.quantize(CENT) != amount:
            raise InvalidInput()
    except InvalidOperation:
        # too many digits to hold at cent precision
        raise InvalidInput()
    return amount


def parse_account_id(raw: Any) -> int:
    """Convert a submitted account id (int or digit string) to an int."""
    if raw is None or isinstance(raw, bool):
        raise InvalidInput()

    if isinstance(raw, int):
        return raw

    if isinstance(raw, float):
        if not raw.is_integer():
            raise InvalidInput()
        return int(raw)

    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            raise InvalidInput()
        try:
            return int(raw)
        except ValueError:
            raise InvalidInput()

    raise InvalidInput()


class TransferEngine:
    """Executes transfers against an account store and a ledger."""

    def __init__(
        self,
        accounts: AccountStore,
        ledger: Ledger,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            accounts: Store holding the balances to move
            ledger: Ledger receiving one entry per executed transfer
            clock: Timestamp source (defaults to current UTC time)
        """
        self.accounts = accounts
        self.ledger = ledger
        self.clock = clock or utc_now

    def execute(
        self,
        acting_user_id: int,
        from_account_id: Any,
        to_account_id: Any,
        amount: Any,
    ) -> Transfer:
        """
        Move `amount` from one account to another on behalf of a user.

        Account ids and amount may be given in their raw submitted form;
        they are parsed here before any lookup.

        Returns:
            The Transfer recorded in the ledger

        Raises:
            TransferError: One of the subclasses listed in the module
                docstring, in validation order
        """
        value = parse_amount(amount)
        source_id = parse_account_id(from_account_id)
        destination_id = parse_account_id(to_account_id)

        with self.accounts.locked():
            source = self.accounts.find_by_id(source_id)
            if source is None or source.owner_id != acting_user_id:
                raise SourceAccountUnauthorized()

            destination = self.accounts.find_by_id(destination_id)
            if destination is None:
                raise DestinationAccountNotFound()

            if source.balance < value:
                raise InsufficientFunds()

            try:
                exact_sum(source.balance, -value)
                exact_sum(destination.balance, value)
            except Inexact:
                raise InvalidInput("Amount cannot be applied without rounding")

            self.accounts.apply_delta(source.id, -value)
            self.accounts.apply_delta(destination.id, value)

            return self.ledger.append(
                from_account_id=source.id,
                to_account_id=destination.id,
                amount=value,
                timestamp=self.clock(),
            )
