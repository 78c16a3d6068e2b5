from supabase import Client
from tripplanner.config import settings
from tripplanner.modules.expenses.schemas import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpenseParticipantResponse,
    ExpensePaymentResponse, ParticipantUpdate, PaymentCreate, BalanceResponse
)
from tripplanner.modules.expenses.calculations import (
    SplitError, build_splits, calculate_balances, calculate_equal_split
)
from tripplanner.modules.expenses.receipt_storage import ReceiptStorage
from tripplanner.modules.profiles.service import ProfileService
from typing import Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ExpenseService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _attach_details(self, expenses: List[dict]) -> List[ExpenseResponse]:
        """Load participants and payments for the given expense rows"""
        if not expenses:
            return []
        expense_ids = [e["id"] for e in expenses]
        participants_result = self.supabase.table("expense_participants")\
            .select("*")\
            .in_("expense_id", expense_ids)\
            .order("created_at")\
            .execute()
        payments_result = self.supabase.table("expense_payments")\
            .select("*")\
            .in_("expense_id", expense_ids)\
            .order("payment_date")\
            .execute()
        participants: Dict[str, list] = {}
        for p in participants_result.data or []:
            participants.setdefault(p["expense_id"], []).append(p)
        payments: Dict[str, list] = {}
        for p in payments_result.data or []:
            payments.setdefault(p["expense_id"], []).append(p)
        return [
            ExpenseResponse(**e, participants=participants.get(e["id"], []), payments=payments.get(e["id"], []))
            for e in expenses
        ]

    def get_expenses_for_trip(self, trip_id: str) -> List[ExpenseResponse]:
        """All expenses of a trip with participants and payments, newest first"""
        try:
            result = self.supabase.table("expenses")\
                .select("*")\
                .eq("trip_id", trip_id)\
                .order("expense_date", desc=True)\
                .execute()
            return self._attach_details(result.data or [])
        except Exception as e:
            logger.error(f"Error fetching expenses: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_expense(self, expense_id: str) -> ExpenseResponse:
        try:
            result = self.supabase.table("expenses")\
                .select("*")\
                .eq("id", expense_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Expense not found")
            return self._attach_details(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_expense(
        self,
        trip_id: str,
        expense_data: ExpenseCreate,
        user_id: str,
        member_ids: Optional[List[str]] = None
    ) -> ExpenseResponse:
        """Create an expense and its participant shares"""
        try:
            if expense_data.split_method == "equal":
                participant_ids = expense_data.participant_ids or [s.user_id for s in expense_data.splits]
                splits = build_splits("equal", expense_data.total_amount, participant_ids=participant_ids)
            elif expense_data.split_method == "by_amount":
                splits = build_splits(
                    "by_amount", expense_data.total_amount,
                    amounts={s.user_id: s.amount for s in expense_data.splits}
                )
            else:
                splits = build_splits(
                    "by_percentage", expense_data.total_amount,
                    percentages={s.user_id: s.percentage for s in expense_data.splits}
                )
        except SplitError as e:
            raise HTTPException(status_code=422, detail=str(e))

        if member_ids is not None:
            outsiders = {expense_data.paid_by, *[uid for uid, _ in splits]} - set(member_ids)
            if outsiders:
                raise HTTPException(
                    status_code=400,
                    detail=f"Not members of this trip: {', '.join(sorted(outsiders))}"
                )

        try:
            result = self.supabase.table("expenses").insert({
                "trip_id": trip_id,
                "name": expense_data.name,
                "description": expense_data.description,
                "total_amount": expense_data.total_amount,
                "currency": (expense_data.currency or settings.default_currency).upper(),
                "category": expense_data.category,
                "paid_by": expense_data.paid_by,
                "split_method": expense_data.split_method,
                "expense_date": (expense_data.expense_date.isoformat() if expense_data.expense_date else _now()),
                "created_by": user_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create expense")
            expense = result.data[0]

            try:
                participants_result = self.supabase.table("expense_participants").insert([
                    {"expense_id": expense["id"], "user_id": uid, "amount_owed": amount, "is_settled": False}
                    for uid, amount in splits
                ]).execute()
            except Exception as e:
                logger.error(f"Error creating expense participants, removing expense {expense['id']}: {e}")
                self.supabase.table("expenses").delete().eq("id", expense["id"]).execute()
                raise HTTPException(status_code=500, detail=str(e))

            logger.info(f"Expense {expense['id']} created on trip {trip_id} with {len(splits)} participant(s)")
            return ExpenseResponse(**expense, participants=participants_result.data or [], payments=[])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating expense: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_expense(self, expense_id: str, expense_data: ExpenseUpdate) -> ExpenseResponse:
        """Update expense fields. Participant shares are left untouched."""
        try:
            update_data = {"updated_at": _now()}
            if expense_data.name:
                update_data["name"] = expense_data.name
            if expense_data.description is not None:
                update_data["description"] = expense_data.description
            if expense_data.total_amount is not None:
                update_data["total_amount"] = expense_data.total_amount
            if expense_data.currency is not None:
                update_data["currency"] = expense_data.currency.upper()
            if expense_data.category is not None:
                update_data["category"] = expense_data.category
            if expense_data.expense_date is not None:
                update_data["expense_date"] = expense_data.expense_date.isoformat()

            result = self.supabase.table("expenses")\
                .update(update_data)\
                .eq("id", expense_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Expense not found")

            return self._attach_details(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating expense: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_expense(self, expense_id: str) -> bool:
        """Delete expense; participants and payments cascade"""
        try:
            result = self.supabase.table("expenses")\
                .delete()\
                .eq("id", expense_id)\
                .execute()
            deleted = result.data or []
            receipt_url = deleted[0].get("receipt_url") if deleted else None
            if receipt_url and settings.s3_configured:
                storage = ReceiptStorage()
                storage.delete_receipt(storage.key_from_url(receipt_url))
            return len(deleted) > 0
        except Exception as e:
            logger.error(f"Error deleting expense: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_participant(self, participant_id: str, updates: ParticipantUpdate) -> ExpenseParticipantResponse:
        """Update a share; settling stamps settled_at, unsettling clears it"""
        try:
            update_data = {"updated_at": _now()}
            if updates.amount_owed is not None:
                update_data["amount_owed"] = updates.amount_owed
            if updates.is_settled is True:
                update_data["is_settled"] = True
                update_data["settled_at"] = _now()
            elif updates.is_settled is False:
                update_data["is_settled"] = False
                update_data["settled_at"] = None

            result = self.supabase.table("expense_participants")\
                .update(update_data)\
                .eq("id", participant_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Expense participant not found")

            return ExpenseParticipantResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating expense participant: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def mark_participant_settled(self, participant_id: str) -> ExpenseParticipantResponse:
        return self.update_participant(participant_id, ParticipantUpdate(is_settled=True))

    def mark_participant_unsettled(self, participant_id: str) -> ExpenseParticipantResponse:
        return self.update_participant(participant_id, ParticipantUpdate(is_settled=False))

    def add_member_to_expense(self, expense_id: str, user_id: str, amount: Optional[float] = None) -> ExpenseParticipantResponse:
        """Add a participant to an existing expense, e.g. someone who joined the trip later.

        Without an explicit amount the new member owes an equal share of the
        total counting themselves; existing shares are not changed.
        """
        try:
            expense = self.get_expense(expense_id)
            if any(p.user_id == user_id for p in expense.participants):
                raise HTTPException(status_code=400, detail="User is already a participant of this expense")
            if amount is None:
                amount = calculate_equal_split(expense.total_amount, len(expense.participants) + 1)

            result = self.supabase.table("expense_participants").insert({
                "expense_id": expense_id,
                "user_id": user_id,
                "amount_owed": amount,
                "is_settled": False
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add member to expense")

            return ExpenseParticipantResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding member to expense: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def record_payment(self, expense_id: str, payment_data: PaymentCreate, user_id: str) -> ExpensePaymentResponse:
        """Record a payment between two users against an expense"""
        try:
            result = self.supabase.table("expense_payments").insert({
                "expense_id": expense_id,
                "from_user": payment_data.from_user,
                "to_user": payment_data.to_user,
                "amount": payment_data.amount,
                "payment_method": payment_data.payment_method,
                "notes": payment_data.notes,
                "payment_date": _now(),
                "created_by": user_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record payment")

            return ExpensePaymentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error recording payment: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_payment(self, payment_id: str) -> bool:
        try:
            result = self.supabase.table("expense_payments")\
                .delete()\
                .eq("id", payment_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting payment: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_trip_balances(self, trip_id: str) -> List[BalanceResponse]:
        """Net balance per user over all expenses of the trip"""
        expenses = self.get_expenses_for_trip(trip_id)
        rows = [e.model_dump() for e in expenses]
        user_ids = {e["paid_by"] for e in rows}
        for e in rows:
            user_ids.update(p["user_id"] for p in e["participants"])
        profiles = ProfileService(self.supabase).get_profiles_by_ids(list(user_ids))
        return [BalanceResponse(**b) for b in calculate_balances(rows, profiles)]

    def attach_receipt(
        self,
        expense: ExpenseResponse,
        file_content: bytes,
        filename: str,
        content_type: str,
        storage: Optional[ReceiptStorage] = None
    ) -> ExpenseResponse:
        """Store a receipt file in S3 and link it from the expense"""
        if len(file_content) > settings.receipt_max_bytes:
            raise HTTPException(status_code=413, detail="Receipt file is too large")
        if storage is None:
            try:
                storage = ReceiptStorage()
            except ValueError as e:
                raise HTTPException(status_code=503, detail=str(e))
        try:
            key = storage.build_key(expense.trip_id, expense.id, filename)
            receipt_url = storage.upload_receipt(file_content, key, content_type or "application/octet-stream")
            result = self.supabase.table("expenses")\
                .update({"receipt_url": receipt_url, "updated_at": _now()})\
                .eq("id", expense.id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Expense not found")
            logger.info(f"Receipt stored for expense {expense.id} at {key}")
            return self._attach_details(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error uploading receipt: {e}")
            raise HTTPException(status_code=500, detail=str(e))
