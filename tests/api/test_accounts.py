"""
Tests for account endpoints and ledger-header scoping.
"""

from decimal import Decimal

from sqlalchemy.exc import OperationalError

from family_ledger.services import ledger_service


class TestLedgerHeader:

    def test_missing_header_returns_403(self, client, auth_headers, ledger_headers):
        response = client.get("/accounts", headers=auth_headers())
        assert response.status_code == 403

    def test_malformed_header_returns_403(self, client, ledger_headers):
        headers = dict(ledger_headers, **{"X-Ledger-Id": "abc"})
        response = client.get("/accounts", headers=headers)
        assert response.status_code == 403

    def test_other_users_ledger_returns_403(self, client, auth_headers, ledger_headers):
        stranger = auth_headers("user-9", "s@test.com",
                                ledger_id=ledger_headers["X-Ledger-Id"])
        response = client.get("/accounts", headers=stranger)
        assert response.status_code == 403


class TestAccounts:

    def test_create_returns_201(self, client, ledger_headers):
        response = client.post("/accounts", json={
            "name": "Bank", "kind": "bank", "balance": "500.00",
        }, headers=ledger_headers)
        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["balance"]) == Decimal("500")
        assert data["currency"] == "TWD"
        assert data["is_visible"] is True

    def test_invalid_kind_returns_422(self, client, ledger_headers):
        response = client.post("/accounts", json={
            "name": "Bank", "kind": "crypto",
        }, headers=ledger_headers)
        assert response.status_code == 422

    def test_get_patch_delete(self, client, ledger_headers):
        account_id = client.post("/accounts", json={
            "name": "Cash", "kind": "cash", "balance": "10",
        }, headers=ledger_headers).json()["id"]

        response = client.patch(f"/accounts/{account_id}", json={
            "name": "Wallet", "balance": "25.5",
        }, headers=ledger_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Wallet"
        assert Decimal(response.json()["balance"]) == Decimal("25.5")

        response = client.delete(f"/accounts/{account_id}", headers=ledger_headers)
        assert response.status_code == 200
        assert response.json()["deleted_id"] == account_id

        response = client.get(f"/accounts/{account_id}", headers=ledger_headers)
        assert response.status_code == 404

    def test_list_accounts(self, client, ledger_headers):
        for name in ("A", "B"):
            client.post("/accounts", json={"name": name, "kind": "bank"},
                        headers=ledger_headers)

        response = client.get("/accounts", headers=ledger_headers)
        assert [a["name"] for a in response.json()] == ["A", "B"]


class TestMembershipTouch:

    def test_touch_failure_does_not_fail_request(self, client, ledger_headers, monkeypatch):
        def failing_update(*args, **kwargs):
            raise OperationalError("UPDATE ledger_members", {}, Exception("database is locked"))

        monkeypatch.setattr(ledger_service, "update", failing_update)

        response = client.post("/accounts", json={
            "name": "Bank", "kind": "bank", "balance": "10",
        }, headers=ledger_headers)
        assert response.status_code == 201

        response = client.get("/accounts", headers=ledger_headers)
        assert response.status_code == 200
        assert [a["name"] for a in response.json()] == ["Bank"]


class TestMoneyFormat:

    def test_amounts_serialised_as_decimal_strings(self, client, ledger_headers):
        response = client.post("/accounts", json={
            "name": "Bank", "kind": "bank", "balance": 300,
        }, headers=ledger_headers)
        assert response.json()["balance"] == "300.0000"
