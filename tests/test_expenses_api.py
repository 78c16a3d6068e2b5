"""API tests for expenses, shares, payments and balances."""

import pytest

from tripplanner.config import settings
from tripplanner.modules.expenses.service import ExpenseService
from tests.conftest import ALICE, BOB, CAROL, MALLORY


@pytest.fixture(autouse=True)
def _default_currency(monkeypatch):
    monkeypatch.setattr(settings, "default_currency", "USD")


def _create(client, trip_id, **overrides):
    body = {
        "name": "Dinner",
        "total_amount": 90,
        "paid_by": ALICE,
        "participant_ids": [ALICE, BOB, CAROL],
        "expense_date": "2026-06-01T20:00:00+00:00",
    }
    body.update(overrides)
    return client.post(f"/api/v1/trips/{trip_id}/expenses", json=body)


class FakeReceiptStorage:
    def __init__(self):
        self.uploads = []

    @staticmethod
    def build_key(trip_id, expense_id, filename):
        return f"receipts/{trip_id}/{expense_id}/{filename}"

    def upload_receipt(self, file_content, key, content_type):
        self.uploads.append((key, content_type, file_content))
        return f"https://bucket.s3.us-east-1.amazonaws.com/{key}"


class TestCreateExpense:
    """Tests for expense creation and splitting."""

    def test_equal_split(self, client, db, trip):
        response = _create(client, trip["id"])
        assert response.status_code == 201
        data = response.json()
        assert data["currency"] == "USD"
        assert data["created_by"] == ALICE
        assert sorted(p["amount_owed"] for p in data["participants"]) == [30, 30, 30]
        assert len(db.rows("expense_participants", expense_id=data["id"])) == 3

    def test_by_amount_split(self, client, trip):
        response = _create(client, trip["id"], split_method="by_amount", participant_ids=None, splits=[
            {"user_id": ALICE, "amount": 50},
            {"user_id": BOB, "amount": 40},
        ])
        assert response.status_code == 201
        owed = {p["user_id"]: p["amount_owed"] for p in response.json()["participants"]}
        assert owed == {ALICE: 50, BOB: 40}

    def test_by_amount_must_match_total(self, client, db, trip):
        response = _create(client, trip["id"], split_method="by_amount", participant_ids=None, splits=[
            {"user_id": ALICE, "amount": 50},
            {"user_id": BOB, "amount": 30},
        ])
        assert response.status_code == 422
        assert "don't match total amount" in response.json()["detail"]
        assert db.rows("expenses") == []

    def test_by_percentage_split(self, client, trip):
        response = _create(client, trip["id"], total_amount=100, split_method="by_percentage",
                           participant_ids=None, splits=[
                               {"user_id": ALICE, "percentage": 50},
                               {"user_id": BOB, "percentage": 25},
                               {"user_id": CAROL, "percentage": 25},
                           ])
        owed = {p["user_id"]: p["amount_owed"] for p in response.json()["participants"]}
        assert owed == {ALICE: 50, BOB: 25, CAROL: 25}

    def test_percentages_must_add_up(self, client, trip):
        response = _create(client, trip["id"], split_method="by_percentage", participant_ids=None, splits=[
            {"user_id": ALICE, "percentage": 50},
            {"user_id": BOB, "percentage": 40},
        ])
        assert response.status_code == 422
        assert response.json()["detail"] == "Split percentages add up to 90%, expected 100%"

    def test_missing_participants(self, client, trip):
        assert _create(client, trip["id"], participant_ids=[]).status_code == 422

    def test_outsider_cannot_take_part(self, client, trip):
        response = _create(client, trip["id"], participant_ids=[ALICE, MALLORY])
        assert response.status_code == 400
        assert MALLORY in response.json()["detail"]

    def test_failed_shares_remove_expense(self, client, db, trip):
        db.fail("expense_participants", "insert")
        assert _create(client, trip["id"]).status_code == 500
        assert db.rows("expenses") == []

    def test_non_member_cannot_list(self, client, trip, login_as):
        login_as(MALLORY)
        assert client.get(f"/api/v1/trips/{trip['id']}/expenses").status_code == 404


class TestShares:
    """Tests for participants, settling and payments."""

    def test_settle_and_unsettle(self, client, trip):
        expense = _create(client, trip["id"]).json()
        share = next(p for p in expense["participants"] if p["user_id"] == BOB)

        settled = client.post(f"/api/v1/expense-participants/{share['id']}/settle").json()
        assert settled["is_settled"] is True
        assert settled["settled_at"] is not None

        unsettled = client.post(f"/api/v1/expense-participants/{share['id']}/unsettle").json()
        assert unsettled["is_settled"] is False
        assert unsettled["settled_at"] is None

    def test_add_participant_with_equal_share(self, client, trip):
        expense = _create(client, trip["id"], participant_ids=[ALICE, BOB]).json()
        response = client.post(f"/api/v1/expenses/{expense['id']}/participants", json={"user_id": CAROL})
        assert response.status_code == 201
        assert response.json()["amount_owed"] == 30

    def test_add_participant_twice(self, client, trip):
        expense = _create(client, trip["id"]).json()
        response = client.post(f"/api/v1/expenses/{expense['id']}/participants", json={"user_id": BOB})
        assert response.status_code == 400

    def test_add_outsider(self, client, trip):
        expense = _create(client, trip["id"]).json()
        response = client.post(f"/api/v1/expenses/{expense['id']}/participants", json={"user_id": MALLORY})
        assert response.status_code == 400

    def test_record_and_delete_payment(self, client, db, trip):
        expense = _create(client, trip["id"]).json()
        response = client.post(f"/api/v1/expenses/{expense['id']}/payments", json={
            "from_user": BOB, "to_user": ALICE, "amount": 30, "payment_method": "cash",
        })
        assert response.status_code == 201
        payment = response.json()
        assert payment["created_by"] == ALICE
        assert client.get(f"/api/v1/expenses/{expense['id']}").json()["payments"][0]["id"] == payment["id"]

        assert client.delete(f"/api/v1/expense-payments/{payment['id']}").status_code == 204
        assert db.rows("expense_payments") == []

    def test_payment_to_self(self, client, trip):
        expense = _create(client, trip["id"]).json()
        response = client.post(f"/api/v1/expenses/{expense['id']}/payments", json={
            "from_user": BOB, "to_user": BOB, "amount": 30,
        })
        assert response.status_code == 422

    def test_unknown_share(self, client, trip):
        assert client.post("/api/v1/expense-participants/missing/settle").status_code == 404


class TestBalances:
    """Tests for the trip balance sheet."""

    def test_balances_net_out_between_users(self, client, trip):
        _create(client, trip["id"])
        _create(client, trip["id"], name="Taxi", total_amount=30, paid_by=BOB,
                participant_ids=[ALICE, BOB], expense_date="2026-06-02T10:00:00+00:00")

        balances = {b["user_id"]: b for b in client.get(f"/api/v1/trips/{trip['id']}/balances").json()}
        assert balances[ALICE]["total_paid"] == 90
        assert balances[ALICE]["total_owed"] == 45
        assert balances[ALICE]["balance"] == 45
        assert balances[BOB]["balance"] == -15
        assert balances[CAROL]["balance"] == -30
        assert balances[CAROL]["username"] == "carol"
        owed_by = {c["user_id"]: c["amount"] for c in balances[ALICE]["owed_by"]}
        assert owed_by == {BOB: 15, CAROL: 30}
        assert balances[BOB]["owes_to"][0]["user_id"] == ALICE

    def test_settled_shares_do_not_count(self, client, trip):
        expense = _create(client, trip["id"]).json()
        share = next(p for p in expense["participants"] if p["user_id"] == CAROL)
        client.post(f"/api/v1/expense-participants/{share['id']}/settle")

        balances = {b["user_id"]: b for b in client.get(f"/api/v1/trips/{trip['id']}/balances").json()}
        assert balances[CAROL]["total_owed"] == 0
        assert balances[CAROL]["owes_to"] == []


class TestReceipts:
    """Tests for receipt uploads."""

    def test_upload_without_s3(self, client, trip, monkeypatch):
        monkeypatch.setattr(settings, "s3_bucket_name", None)
        expense = _create(client, trip["id"]).json()
        response = client.post(
            f"/api/v1/expenses/{expense['id']}/receipt",
            files={"file": ("receipt.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == 503

    def test_receipt_too_large(self, client, trip, monkeypatch):
        monkeypatch.setattr(settings, "receipt_max_bytes", 4)
        expense = _create(client, trip["id"]).json()
        response = client.post(
            f"/api/v1/expenses/{expense['id']}/receipt",
            files={"file": ("receipt.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == 413

    def test_receipt_url_is_stored(self, client, db, trip):
        expense_id = _create(client, trip["id"]).json()["id"]
        service = ExpenseService(db)
        storage = FakeReceiptStorage()

        updated = service.attach_receipt(
            service.get_expense(expense_id), b"jpeg", "r.jpg", "image/jpeg", storage=storage
        )

        key = f"receipts/{trip['id']}/{expense_id}/r.jpg"
        assert storage.uploads == [(key, "image/jpeg", b"jpeg")]
        assert updated.receipt_url.endswith(key)
        assert db.rows("expenses", id=expense_id)[0]["receipt_url"] == updated.receipt_url
        assert len(updated.participants) == 3
