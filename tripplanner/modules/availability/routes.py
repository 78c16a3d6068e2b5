from fastapi import APIRouter, Depends, HTTPException, Query
from tripplanner.database.supabase_client import get_supabase
from tripplanner.modules.availability.schemas import (
    AvailabilitySet, TripAvailabilitySet, AvailabilityClear, UserAvailabilityResponse,
    TripUserAvailabilityResponse, MemberAvailabilityCell, HeatmapResponse,
    SyncResult, SyncStatus, MutationResult
)
from tripplanner.modules.availability.service import AvailabilityService
from tripplanner.modules.availability.heatmap import next_n_days, month_date_range
from tripplanner.modules.trips.service import TripService
from tripplanner.core.dependencies import get_current_user_id, check_trip_member
from supabase import Client
from typing import List, Dict, Optional, Tuple
from datetime import date

router = APIRouter(tags=["availability"])

DEFAULT_WINDOW_DAYS = 30


def get_availability_service(supabase: Client = Depends(get_supabase)) -> AvailabilityService:
    return AvailabilityService(supabase)


def date_window(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12)
) -> Tuple[date, date]:
    """Explicit range, else a calendar month, else the next 30 days"""
    if (start_date is None) != (end_date is None):
        raise HTTPException(status_code=422, detail="start_date and end_date must be given together")
    if start_date and end_date:
        return start_date, end_date
    if year and month:
        start, end = month_date_range(year, month)
    else:
        start, end = next_n_days(DEFAULT_WINDOW_DAYS)
    return date.fromisoformat(start), date.fromisoformat(end)


@router.get("/availability/me", response_model=List[UserAvailabilityResponse])
async def get_my_availability(
    window: Tuple[date, date] = Depends(date_window),
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service)
):
    """Personal calendar shared by all of the user's trips"""
    return service.get_user_central_availability(current_user["id"], *window)


@router.put("/availability/me", response_model=List[UserAvailabilityResponse])
async def set_my_availability(
    body: AvailabilitySet,
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service)
):
    return service.set_user_central_availability(current_user["id"], body.dates)


@router.post("/availability/me/clear", response_model=MutationResult)
async def clear_my_availability(
    body: AvailabilityClear,
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service)
):
    count = service.clear_user_central_availability(current_user["id"], body.dates)
    return MutationResult(count=count)


@router.get("/trips/{trip_id}/availability", response_model=List[MemberAvailabilityCell])
async def get_members_availability(
    trip_id: str,
    window: Tuple[date, date] = Depends(date_window),
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service),
    supabase: Client = Depends(get_supabase)
):
    """Effective availability of every trip member per date"""
    check_trip_member(trip_id, current_user, supabase)
    member_ids = TripService(supabase).list_member_ids(trip_id)
    return service.get_trip_members_availability(trip_id, member_ids, *window)


@router.get("/trips/{trip_id}/availability/heatmap", response_model=HeatmapResponse)
async def get_heatmap(
    trip_id: str,
    window: Tuple[date, date] = Depends(date_window),
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    member_ids = TripService(supabase).list_member_ids(trip_id)
    return service.get_trip_availability_heatmap(trip_id, member_ids, *window)


@router.get("/trips/{trip_id}/availability/me", response_model=List[TripUserAvailabilityResponse])
async def get_my_trip_availability(
    trip_id: str,
    window: Tuple[date, date] = Depends(date_window),
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.get_trip_user_availability(trip_id, current_user["id"], *window)


@router.put("/trips/{trip_id}/availability/me", response_model=List[TripUserAvailabilityResponse])
async def set_my_trip_availability(
    trip_id: str,
    body: TripAvailabilitySet,
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.set_trip_user_availability(trip_id, current_user["id"], body.dates)


@router.post("/trips/{trip_id}/availability/me/clear", response_model=MutationResult)
async def clear_my_trip_availability(
    trip_id: str,
    body: AvailabilityClear,
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    count = service.clear_trip_user_availability(trip_id, current_user["id"], body.dates)
    return MutationResult(count=count)


@router.post("/trips/{trip_id}/availability/sync", response_model=SyncResult)
async def sync_availability(
    trip_id: str,
    window: Tuple[date, date] = Depends(date_window),
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service),
    supabase: Client = Depends(get_supabase)
):
    """Copy the personal calendar into this trip without touching manual overrides"""
    check_trip_member(trip_id, current_user, supabase)
    return SyncResult(synced_count=service.sync_central_to_trip(current_user["id"], trip_id, *window))


@router.get("/trips/{trip_id}/availability/sync-status", response_model=SyncStatus)
async def get_sync_status(
    trip_id: str,
    window: Tuple[date, date] = Depends(date_window),
    current_user: Dict = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.check_sync_status(current_user["id"], trip_id, *window)
