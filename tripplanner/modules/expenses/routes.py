from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from tripplanner.database.supabase_client import get_supabase
from tripplanner.modules.expenses.schemas import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpenseParticipantResponse,
    ExpensePaymentResponse, ParticipantUpdate, ParticipantAdd, PaymentCreate, BalanceResponse
)
from tripplanner.modules.expenses.service import ExpenseService
from tripplanner.modules.trips.service import TripService
from tripplanner.core.dependencies import get_current_user_id, check_trip_member, check_record_access
from supabase import Client
from typing import List, Dict

router = APIRouter(tags=["expenses"])


def get_expense_service(supabase: Client = Depends(get_supabase)) -> ExpenseService:
    return ExpenseService(supabase)


@router.get("/trips/{trip_id}/expenses", response_model=List[ExpenseResponse])
async def list_expenses(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.get_expenses_for_trip(trip_id)


@router.post("/trips/{trip_id}/expenses", response_model=ExpenseResponse, status_code=201)
async def create_expense(
    trip_id: str,
    expense_data: ExpenseCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    """Create an expense split equally, by amount or by percentage between trip members"""
    check_trip_member(trip_id, current_user, supabase)
    member_ids = TripService(supabase).list_member_ids(trip_id)
    return service.create_expense(trip_id, expense_data, current_user["id"], member_ids)


@router.get("/trips/{trip_id}/balances", response_model=List[BalanceResponse])
async def get_trip_balances(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    """Who is owed and who owes, across all unsettled shares of the trip"""
    check_trip_member(trip_id, current_user, supabase)
    return service.get_trip_balances(trip_id)


@router.get("/expenses/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("expenses", expense_id, current_user, supabase)
    return service.get_expense(expense_id)


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: str,
    expense_data: ExpenseUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("expenses", expense_id, current_user, supabase)
    return service.update_expense(expense_id, expense_data)


@router.delete("/expenses/{expense_id}", status_code=204)
async def delete_expense(
    expense_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("expenses", expense_id, current_user, supabase)
    service.delete_expense(expense_id)
    return None


@router.post("/expenses/{expense_id}/receipt", response_model=ExpenseResponse)
async def upload_receipt(
    expense_id: str,
    file: UploadFile = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    """Upload a receipt image or PDF for the expense"""
    check_record_access("expenses", expense_id, current_user, supabase)
    expense = service.get_expense(expense_id)
    content = await file.read()
    return service.attach_receipt(expense, content, file.filename, file.content_type)


@router.post("/expenses/{expense_id}/participants", response_model=ExpenseParticipantResponse, status_code=201)
async def add_participant(
    expense_id: str,
    body: ParticipantAdd,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    """Add a trip member to an existing expense"""
    trip_id = check_record_access("expenses", expense_id, current_user, supabase)
    if body.user_id not in TripService(supabase).list_member_ids(trip_id):
        raise HTTPException(status_code=400, detail="User is not a member of this trip")
    return service.add_member_to_expense(expense_id, body.user_id, body.amount)


@router.put("/expense-participants/{participant_id}", response_model=ExpenseParticipantResponse)
async def update_participant(
    participant_id: str,
    updates: ParticipantUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("expense_participants", participant_id, current_user, supabase)
    return service.update_participant(participant_id, updates)


@router.post("/expense-participants/{participant_id}/settle", response_model=ExpenseParticipantResponse)
async def settle_participant(
    participant_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("expense_participants", participant_id, current_user, supabase)
    return service.mark_participant_settled(participant_id)


@router.post("/expense-participants/{participant_id}/unsettle", response_model=ExpenseParticipantResponse)
async def unsettle_participant(
    participant_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("expense_participants", participant_id, current_user, supabase)
    return service.mark_participant_unsettled(participant_id)


@router.post("/expenses/{expense_id}/payments", response_model=ExpensePaymentResponse, status_code=201)
async def record_payment(
    expense_id: str,
    payment_data: PaymentCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("expenses", expense_id, current_user, supabase)
    return service.record_payment(expense_id, payment_data, current_user["id"])


@router.delete("/expense-payments/{payment_id}", status_code=204)
async def delete_payment(
    payment_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ExpenseService = Depends(get_expense_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("expense_payments", payment_id, current_user, supabase)
    service.delete_payment(payment_id)
    return None
