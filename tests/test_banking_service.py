"""Tests for the per-user banking service."""
import threading
from decimal import Decimal

import pytest
from prometheus_client import REGISTRY

from demobank.errors import InsufficientFunds
from demobank.models import Account, User
from demobank.services.banking import BankingService
from demobank.state import Bank, create_demo_bank


def sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestBankingService:

    def setup_method(self):
        self.bank = create_demo_bank()
        self.service = BankingService(self.bank)
        self.alice = self.bank.identity.get(1)
        self.bob = self.bank.identity.get(2)

    def test_list_accounts(self):
        assert [a.id for a in self.service.list_accounts(self.alice)] == [1001, 1002]

    def test_transfer_records_metrics(self):
        before = sample("demobank_transfer_total", {"outcome": "success"})
        transfer = self.service.transfer(self.alice, 1001, 2001, "10")
        after = sample("demobank_transfer_total", {"outcome": "success"})

        assert transfer.amount == Decimal("10")
        assert after == before + 1

    def test_rejection_is_reraised_and_counted(self):
        labels = {"code": "INSUFFICIENT_FUNDS"}
        before = sample("demobank_transfer_rejected_total", labels)

        with pytest.raises(InsufficientFunds):
            self.service.transfer(self.bob, 2001, 1001, 751)

        assert sample("demobank_transfer_rejected_total", labels) == before + 1

    def test_history_includes_incoming_and_outgoing(self):
        self.service.transfer(self.alice, 1001, 2001, 1)
        self.service.transfer(self.alice, 1002, 1001, 2)
        self.service.transfer(self.bob, 2001, 1001, 3)

        assert [t.id for t in self.service.transfer_history(self.bob)] == [1, 3]
        assert [t.id for t in self.service.transfer_history(self.alice)] == [1, 2, 3]


class TestConsistentReads:
    """Reads taken while transfers run never see a half-applied transfer."""

    TRANSFERS = 400

    def setup_method(self):
        self.owner = User(id=1, username="owner", name="Owner", credential="x")
        self.bank = Bank(
            users=[self.owner],
            accounts=[
                Account(id=1, owner_id=1, category="CHECKING", balance=Decimal("1000")),
                Account(id=2, owner_id=1, category="SAVINGS", balance=Decimal("0")),
            ],
        )
        self.service = BankingService(self.bank)

    def test_reads_during_transfers(self):
        done = threading.Event()
        problems = []

        def writer():
            try:
                for _ in range(self.TRANSFERS):
                    self.bank.engine.execute(1, 1, 2, "1")
            finally:
                done.set()

        def reader():
            while not done.is_set():
                # History first: every entry seen must already be in the balances
                history = self.service.transfer_history(self.owner)
                accounts = {a.id: a.balance for a in self.service.list_accounts(self.owner)}

                if accounts[1] + accounts[2] != Decimal("1000"):
                    problems.append(("pair sum", accounts))
                if accounts[2] < len(history):
                    problems.append(("ledger ahead of balances", len(history), accounts))

                # Balances first: every applied transfer must already be in the ledger
                accounts = {a.id: a.balance for a in self.bank.accounts.list_by_owner(1)}
                history = self.bank.ledger.list_for_accounts({1, 2})
                if len(history) < accounts[2]:
                    problems.append(("balances ahead of ledger", len(history), accounts))

        readers = [threading.Thread(target=reader) for _ in range(3)]
        writer_thread = threading.Thread(target=writer)
        for thread in readers:
            thread.start()
        writer_thread.start()
        writer_thread.join()
        for thread in readers:
            thread.join()

        assert problems == []
        assert self.bank.accounts.find_by_id(1).balance == Decimal("600")
        assert self.bank.accounts.find_by_id(2).balance == Decimal("400")
        assert [t.id for t in self.service.transfer_history(self.owner)] == list(
            range(1, self.TRANSFERS + 1)
        )
