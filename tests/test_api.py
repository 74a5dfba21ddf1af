"""
Integration tests for the Bank Ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from bank_ledger.api import create_app
from bank_ledger.registry import AccountRegistry


@pytest.fixture
def registry():
    return AccountRegistry()


@pytest.fixture
def client(registry):
    """Create a test client around an isolated registry"""
    return TestClient(create_app(registry))


def create(client, number, owner, balance):
    r = client.post("/accounts", json={
        "account_number": number,
        "owner_name": owner,
        "initial_balance": balance
    })
    assert r.status_code == 201
    return r.json()


class TestHealthEndpoints:
    """Test basic health endpoint"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_default_registry(self):
        """Test the factory builds its own registry when none is given"""
        app = create_app()
        assert isinstance(app.state.registry, AccountRegistry)


class TestAccountFlow:
    """End-to-end account tests"""

    def test_create_and_get_account(self, client, registry):
        data = create(client, "111", "Alice", "1000")
        assert data["account_number"] == "111"
        assert data["balance"] == "1000.00"

        r = client.get("/accounts/111")
        assert r.status_code == 200
        assert r.json()["owner_name"] == "Alice"
        assert registry.get_account("111").balance == Decimal('1000.00')

    def test_create_duplicate(self, client):
        create(client, "111", "Alice", "1000")
        r = client.post("/accounts", json={"account_number": "111", "owner_name": "Bob"})
        assert r.status_code == 409
        assert r.json()["error"] == "duplicate_account"

    def test_create_invalid(self, client):
        r = client.post("/accounts", json={
            "account_number": "111", "owner_name": "Alice", "initial_balance": "-5"
        })
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_argument"

    def test_get_missing_account(self, client):
        r = client.get("/accounts/999")
        assert r.status_code == 404
        assert r.json()["error"] == "account_not_found"

    def test_deposit_and_withdraw(self, client):
        create(client, "111", "Alice", "1000")

        r = client.post("/accounts/111/deposit", json={"amount": "200"})
        assert r.status_code == 200
        assert r.json()["balance"] == "1200.00"

        r = client.post("/accounts/111/withdraw", json={"amount": "50.25"})
        assert r.status_code == 200
        assert r.json()["balance"] == "1149.75"

    def test_invalid_amounts(self, client):
        create(client, "111", "Alice", "1000")

        r = client.post("/accounts/111/deposit", json={"amount": "-100"})
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_amount"

        r = client.post("/accounts/111/deposit", json={"amount": "abc"})
        assert r.status_code == 400

        r = client.post("/accounts/111/withdraw", json={"amount": "5000"})
        assert r.status_code == 422
        assert r.json()["error"] == "insufficient_funds"

        r = client.post("/accounts/999/deposit", json={"amount": "1"})
        assert r.status_code == 404

    def test_amount_too_large(self, client, registry):
        """Test amounts beyond cent precision are a client error"""
        create(client, "111", "Alice", "1000")
        create(client, "222", "Bob", "500")

        r = client.post("/accounts/111/deposit", json={"amount": "1e27"})
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_amount"

        r = client.post("/transfers", json={"from_account": "111", "to_account": "222",
                                            "amount": "99999999999999999999999999999"})
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_argument"

        r = client.post("/accounts", json={"account_number": "333", "owner_name": "Carol",
                                           "initial_balance": "1e27"})
        assert r.status_code == 400

        assert registry.get_total_bank_balance() == Decimal('1500.00')

    def test_numeric_json_amounts(self, client):
        """Test amounts may be sent as JSON numbers"""
        create(client, "111", "Alice", 1000)

        r = client.post("/accounts/111/deposit", json={"amount": 200})
        assert r.status_code == 200
        assert r.json()["balance"] == "1200.00"

        r = client.post("/accounts/111/withdraw", json={"amount": 0.1})
        assert r.status_code == 200
        assert r.json()["balance"] == "1199.90"

    def test_malformed_body(self, client):
        """Test request validation failures use the ledger error shape"""
        create(client, "111", "Alice", "1000")

        r = client.post("/accounts/111/deposit", json={})
        assert r.status_code == 400
        body = r.json()
        assert body["error"] == "invalid_argument"
        assert "amount" in body["detail"]

        r = client.post("/accounts/111/deposit", json={"amount": True})
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_argument"

        r = client.post("/transfers", json={"from_account": "111", "amount": "1"})
        assert r.status_code == 400
        assert "to_account" in r.json()["detail"]

    def test_transactions(self, client):
        create(client, "111", "Alice", "1000")
        client.post("/accounts/111/deposit", json={"amount": "200"})

        r = client.get("/accounts/111/transactions")
        assert r.status_code == 200
        data = r.json()
        assert data["balance"] == "1200.00"
        assert [t["kind"] for t in data["transactions"]] == ["initial", "deposit"]
        assert data["transactions"][1]["description"] == "Deposited: $200.00"


class TestTransferFlow:
    """End-to-end transfer tests"""

    def test_transfer(self, client):
        create(client, "111", "Alice", "1000")
        create(client, "222", "Bob", "500")

        r = client.post("/transfers", json={"from_account": "111", "to_account": "222", "amount": "300"})
        assert r.status_code == 200
        data = r.json()
        assert data["from_balance"] == "700.00"
        assert data["to_balance"] == "800.00"

        r = client.get("/summary")
        assert r.json() == {"total_balance": "1500.00", "accounts_count": 2}

        history = client.get("/accounts/222/transactions").json()["transactions"]
        assert history[-1]["kind"] == "transfer_in"
        assert history[-1]["counterparty"] == "111"

    def test_transfer_errors(self, client):
        create(client, "111", "Alice", "1000")
        create(client, "222", "Bob", "500")

        r = client.post("/transfers", json={"from_account": "111", "to_account": "111", "amount": "1"})
        assert r.status_code == 400
        assert r.json()["error"] == "invalid_argument"

        r = client.post("/transfers", json={"from_account": "222", "to_account": "111", "amount": "501"})
        assert r.status_code == 422

        r = client.post("/transfers", json={"from_account": "111", "to_account": "333", "amount": "1"})
        assert r.status_code == 404

        assert client.get("/summary").json()["total_balance"] == "1500.00"
