from fastapi import APIRouter, Depends, HTTPException
from tripplanner.database.supabase_client import get_supabase, get_service_supabase
from tripplanner.modules.trips.schemas import (
    TripCreate, TripUpdate, TripResponse, TripMemberResponse,
    MemberInvite, MemberRoleUpdate, InvitationCreate, InvitationResponse,
    InvitationAccept, InvitationAcceptResponse
)
from tripplanner.modules.trips.service import TripService
from tripplanner.core.dependencies import get_current_user_id, check_trip_member, check_trip_admin, get_access_cache
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/trips", tags=["trips"])


def get_trip_service(
    supabase: Client = Depends(get_supabase),
    lookup_client: Client = Depends(get_service_supabase)
) -> TripService:
    return TripService(supabase, lookup_client)


@router.post("", response_model=TripResponse, status_code=201)
async def create_trip(
    trip_data: TripCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service)
):
    """Create a new trip; the caller becomes its owner"""
    return service.create_trip(trip_data, current_user["id"])


@router.get("", response_model=List[TripResponse])
async def list_trips(
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service)
):
    """List trips the caller is a member of"""
    return service.list_user_trips(current_user["id"])


@router.post("/join", response_model=InvitationAcceptResponse)
async def accept_invitation(
    body: InvitationAccept,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service)
):
    """Join a trip with an invitation token"""
    return service.accept_invitation(body.token, current_user["id"])


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service),
    supabase: Client = Depends(get_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Get trip by ID (only if the caller is a member)"""
    check_trip_member(trip_id, current_user, supabase, cache)
    return service.get_trip(trip_id)


@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: str,
    trip_data: TripUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service),
    supabase: Client = Depends(get_supabase)
):
    """Update trip (owner or co-owner)"""
    check_trip_admin(trip_id, current_user, supabase)
    return service.update_trip(trip_id, trip_data)


@router.delete("/{trip_id}", status_code=204)
async def delete_trip(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete trip (owner only)"""
    role = check_trip_member(trip_id, current_user, supabase)
    if role != "owner":
        raise HTTPException(status_code=403, detail="Only the trip owner can delete the trip")
    service.delete_trip(trip_id)
    return None


@router.get("/{trip_id}/members", response_model=List[TripMemberResponse])
async def list_members(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.list_members(trip_id)


@router.post("/{trip_id}/members", response_model=TripMemberResponse, status_code=201)
async def invite_member(
    trip_id: str,
    invite: MemberInvite,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service)
):
    """Add an existing user by email (owner or co-owner)"""
    return service.invite_member_by_email(trip_id, current_user["id"], invite.email)


@router.put("/{trip_id}/members/{user_id}", response_model=TripMemberResponse)
async def update_member_role(
    trip_id: str,
    user_id: str,
    body: MemberRoleUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service),
    supabase: Client = Depends(get_supabase)
):
    role = check_trip_admin(trip_id, current_user, supabase)
    return service.update_member_role(trip_id, user_id, body.role, role)


@router.delete("/{trip_id}/members/{user_id}", status_code=204)
async def remove_member(
    trip_id: str,
    user_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service),
    supabase: Client = Depends(get_supabase)
):
    """Remove a member (owner or co-owner), or leave the trip when user_id is the caller"""
    leaving = user_id == current_user["id"]
    if leaving:
        role = check_trip_member(trip_id, current_user, supabase)
    else:
        role = check_trip_admin(trip_id, current_user, supabase)
    service.remove_member(trip_id, user_id, role, leaving=leaving)
    return None


@router.post("/{trip_id}/invitations", response_model=InvitationResponse, status_code=201)
async def create_invitation(
    trip_id: str,
    body: InvitationCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: TripService = Depends(get_trip_service),
    supabase: Client = Depends(get_supabase)
):
    """Create an invitation link (owner or co-owner)"""
    check_trip_admin(trip_id, current_user, supabase)
    return service.create_invitation(trip_id, body.email)
