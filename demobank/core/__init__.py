"""Account store, ledger and transfer engine."""
from demobank.core.accounts import AccountStore
from demobank.core.engine import TransferEngine
from demobank.core.ledger import Ledger

__all__ = ["AccountStore", "Ledger", "TransferEngine"]
