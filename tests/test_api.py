"""API endpoint tests for the Demo Bank service."""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from demobank.main import app
from demobank.state import create_demo_bank, get_bank


class ApiTestCase:
    """Fresh bank state and client per test."""

    def setup_method(self):
        self.bank = create_demo_bank()
        app.dependency_overrides[get_bank] = lambda: self.bank
        self.client = TestClient(app)

    def teardown_method(self):
        app.dependency_overrides.clear()

    def login(self, username: str = "alice", password: str = "password123"):
        response = self.client.post(
            "/api/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200
        return response

    def transfer(self, from_id, to_id, amount):
        return self.client.post(
            "/api/transfer",
            json={"fromAccountId": from_id, "toAccountId": to_id, "amount": amount},
        )


class TestHealthEndpoint(ApiTestCase):
    """Test the health check endpoint."""

    def test_health_check(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "service" in data
        assert data["uptime"] >= 0


class TestMetricsEndpoint(ApiTestCase):
    """Test the Prometheus metrics endpoint."""

    def test_metrics_endpoint(self):
        self.login()
        self.transfer(1001, 2001, 5)
        response = self.client.get("/metrics")
        assert response.status_code == 200
        assert "demobank_transfer_total" in response.text
        assert "http_requests_total" in response.text


class TestAuthEndpoints(ApiTestCase):
    """Login, logout and /me."""

    def test_login_returns_user(self):
        response = self.login()
        assert response.json() == {"userId": 1, "username": "alice", "name": "Alice Doe"}

    def test_login_invalid_credentials(self):
        response = self.client.post(
            "/api/login", json={"username": "alice", "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_login_missing_fields(self):
        response = self.client.post("/api/login", json={})
        assert response.status_code == 401

    def test_login_non_string_credentials(self):
        response = self.client.post(
            "/api/login", json={"username": 123, "password": "x"}
        )
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_login_without_body(self):
        response = self.client.post("/api/login")
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_me_requires_session(self):
        response = self.client.get("/api/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized", "code": "UNAUTHENTICATED"}

    def test_me_after_login(self):
        self.login("bob")
        response = self.client.get("/api/me")
        assert response.status_code == 200
        assert response.json()["userId"] == 2
        assert response.json()["username"] == "bob"

    def test_logout_ends_session(self):
        self.login()
        response = self.client.post("/api/logout")
        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert self.client.get("/api/me").status_code == 401

    def test_logout_without_session(self):
        assert self.client.post("/api/logout").status_code == 200

    def test_request_id_echoed(self):
        response = self.client.get("/api/me", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestAccountsEndpoint(ApiTestCase):
    """GET /api/accounts."""

    def test_requires_session(self):
        assert self.client.get("/api/accounts").status_code == 401

    def test_lists_only_own_accounts(self):
        self.login()
        response = self.client.get("/api/accounts")
        assert response.status_code == 200
        assert response.json() == [
            {"accountId": 1001, "ownerId": 1, "category": "CHECKING", "balance": 1000},
            {"accountId": 1002, "ownerId": 1, "category": "SAVINGS", "balance": 5000},
        ]

    def test_whole_balances_are_json_integers(self):
        self.login()
        data = self.client.get("/api/accounts").json()
        assert all(isinstance(a["balance"], int) for a in data)

        self.transfer(1001, 2001, "0.5")
        balance = self.client.get("/api/accounts").json()[0]["balance"]
        assert balance == 999.5
        assert isinstance(balance, float)

    def test_other_user(self):
        self.login("bob")
        data = self.client.get("/api/accounts").json()
        assert [a["accountId"] for a in data] == [2001]


class TestTransferEndpoint(ApiTestCase):
    """POST /api/transfer."""

    def test_requires_session(self):
        response = self.transfer(1001, 2001, 10)
        assert response.status_code == 401
        assert self.bank.accounts.find_by_id(1001).balance == Decimal("1000")

    def test_successful_transfer(self):
        self.login()
        response = self.transfer(1001, 2001, 200)
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "SUCCESS"
        assert data["transfer"]["id"] == 1
        assert data["transfer"]["fromAccountId"] == 1001
        assert data["transfer"]["toAccountId"] == 2001
        assert data["transfer"]["amount"] == 200
        assert isinstance(data["transfer"]["timestamp"], str)

        assert self.bank.accounts.find_by_id(1001).balance == Decimal("800")
        assert self.bank.accounts.find_by_id(2001).balance == Decimal("950")

    def test_string_inputs_accepted(self):
        self.login()
        response = self.transfer("1002", "2001", "12.5")
        assert response.status_code == 200
        assert response.json()["transfer"]["fromAccountId"] == 1002
        assert response.json()["transfer"]["amount"] == 12.5

    @pytest.mark.parametrize("from_id,to_id,amount,code", [
        (1001, 2001, 0, "INVALID_INPUT"),
        (1001, 2001, "abc", "INVALID_INPUT"),
        (None, 2001, 10, "INVALID_INPUT"),
        (2001, 1001, 10, "SOURCE_ACCOUNT_UNAUTHORIZED"),
        (1001, 9999, 10, "DESTINATION_ACCOUNT_NOT_FOUND"),
        (1001, 2001, 10000, "INSUFFICIENT_FUNDS"),
    ])
    def test_rejections(self, from_id, to_id, amount, code):
        self.login()
        response = self.transfer(from_id, to_id, amount)
        assert response.status_code == 400
        assert response.json()["code"] == code
        assert self.bank.accounts.find_by_id(1001).balance == Decimal("1000")
        assert self.bank.accounts.find_by_id(2001).balance == Decimal("750")
        assert len(self.bank.ledger) == 0

    def test_sub_cent_amount_rejected(self):
        self.login()
        response = self.transfer(1001, 2001, "0.0000000000000000000000000001")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"
        assert self.bank.accounts.find_by_id(1001).balance == Decimal("1000")

    def test_malformed_body(self):
        self.login()
        response = self.client.post(
            "/api/transfer",
            content="not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    def test_scenario_then_insufficient_funds(self):
        self.login()
        assert self.transfer(1001, 2001, 200).status_code == 200

        response = self.transfer(1001, 2001, 10000)
        assert response.status_code == 400
        assert response.json() == {"error": "Insufficient funds", "code": "INSUFFICIENT_FUNDS"}

        balances = {a["accountId"]: a["balance"] for a in self.client.get("/api/accounts").json()}
        assert balances[1001] == 800


class TestTransfersEndpoint(ApiTestCase):
    """GET /api/transfers."""

    def test_requires_session(self):
        assert self.client.get("/api/transfers").status_code == 401

    def test_history_visible_to_both_parties(self):
        self.login("alice")
        self.transfer(1001, 2001, 200)
        self.transfer(1002, 1001, 50)
        self.client.post("/api/logout")

        self.login("bob")
        self.transfer(2001, 1002, 25)

        bob_history = self.client.get("/api/transfers").json()
        assert [t["id"] for t in bob_history] == [1, 3]

        self.client.post("/api/logout")
        self.login("alice")
        alice_history = self.client.get("/api/transfers").json()
        assert [t["id"] for t in alice_history] == [1, 2, 3]
        assert alice_history[0] == {
            "id": 1,
            "fromAccountId": 1001,
            "toAccountId": 2001,
            "amount": 200,
            "timestamp": alice_history[0]["timestamp"],
        }

    def test_empty_history(self):
        self.login("bob")
        assert self.client.get("/api/transfers").json() == []


class TestOpenApiSchema(ApiTestCase):
    """Error bodies are documented on the routes that return them."""

    def test_error_responses_documented(self):
        paths = self.client.get("/openapi.json").json()["paths"]

        transfer = paths["/api/transfer"]["post"]["responses"]
        assert transfer["400"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
        assert "401" in transfer

        for path in ("/api/me", "/api/accounts", "/api/transfers"):
            assert "401" in paths[path]["get"]["responses"]
        assert "401" in paths["/api/login"]["post"]["responses"]
