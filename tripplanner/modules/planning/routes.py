from fastapi import APIRouter, Depends, Query
from tripplanner.database.supabase_client import get_supabase
from tripplanner.modules.planning.schemas import (
    DateProposalCreate, DateProposalUpdate, DateProposalResponse,
    DestinationProposalCreate, DestinationProposalUpdate, DestinationProposalResponse,
    EnhancedDateProposal, EnhancedDestinationProposal, ProposalStats,
    VoteCast, VoteResponse, CommentCreate, CommentUpdate, CommentResponse
)
from tripplanner.modules.planning.service import PlanningService
from tripplanner.core.dependencies import (
    get_current_user_id, check_trip_member, check_record_access, resolve_trip_id
)
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(tags=["planning"])


def get_planning_service(supabase: Client = Depends(get_supabase)) -> PlanningService:
    return PlanningService(supabase)


# Date proposals

@router.get("/trips/{trip_id}/date-proposals", response_model=List[EnhancedDateProposal])
async def list_date_proposals(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.get_date_proposals(trip_id, current_user["id"])


@router.post("/trips/{trip_id}/date-proposals", response_model=DateProposalResponse, status_code=201)
async def create_date_proposal(
    trip_id: str,
    proposal: DateProposalCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.create_date_proposal(trip_id, current_user["id"], proposal)


@router.put("/date-proposals/{proposal_id}", response_model=DateProposalResponse)
async def update_date_proposal(
    proposal_id: str,
    updates: DateProposalUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    """Update a date proposal; setting is_finalized copies its dates onto the trip"""
    trip_id = resolve_trip_id("date_proposals", proposal_id, supabase)
    role = check_trip_member(trip_id, current_user, supabase)
    return service.update_date_proposal(proposal_id, updates, current_user["id"], role)


@router.delete("/date-proposals/{proposal_id}", status_code=204)
async def delete_date_proposal(
    proposal_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    trip_id = resolve_trip_id("date_proposals", proposal_id, supabase)
    role = check_trip_member(trip_id, current_user, supabase)
    service.delete_date_proposal(proposal_id, current_user["id"], role)
    return None


@router.get("/date-proposals/{proposal_id}/stats", response_model=ProposalStats)
async def get_date_proposal_stats(
    proposal_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("date_proposals", proposal_id, current_user, supabase)
    return service.get_proposal_stats(date_proposal_id=proposal_id)


# Destination proposals

@router.get("/trips/{trip_id}/destination-proposals", response_model=List[EnhancedDestinationProposal])
async def list_destination_proposals(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.get_destination_proposals(trip_id, current_user["id"])


@router.post("/trips/{trip_id}/destination-proposals", response_model=DestinationProposalResponse, status_code=201)
async def create_destination_proposal(
    trip_id: str,
    proposal: DestinationProposalCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.create_destination_proposal(trip_id, current_user["id"], proposal)


@router.put("/destination-proposals/{proposal_id}", response_model=DestinationProposalResponse)
async def update_destination_proposal(
    proposal_id: str,
    updates: DestinationProposalUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    trip_id = resolve_trip_id("destination_proposals", proposal_id, supabase)
    role = check_trip_member(trip_id, current_user, supabase)
    return service.update_destination_proposal(proposal_id, updates, current_user["id"], role)


@router.delete("/destination-proposals/{proposal_id}", status_code=204)
async def delete_destination_proposal(
    proposal_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    trip_id = resolve_trip_id("destination_proposals", proposal_id, supabase)
    role = check_trip_member(trip_id, current_user, supabase)
    service.delete_destination_proposal(proposal_id, current_user["id"], role)
    return None


@router.get("/destination-proposals/{proposal_id}/stats", response_model=ProposalStats)
async def get_destination_proposal_stats(
    proposal_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("destination_proposals", proposal_id, current_user, supabase)
    return service.get_proposal_stats(destination_proposal_id=proposal_id)


# Votes

@router.post("/trips/{trip_id}/votes", response_model=VoteResponse)
async def cast_vote(
    trip_id: str,
    vote: VoteCast,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    """Vote on a date or destination proposal; voting again replaces the previous vote"""
    check_trip_member(trip_id, current_user, supabase)
    return service.cast_vote(trip_id, current_user["id"], vote)


@router.get("/trips/{trip_id}/votes/me", response_model=Optional[VoteResponse])
async def get_my_vote(
    trip_id: str,
    date_proposal_id: Optional[str] = Query(None),
    destination_proposal_id: Optional[str] = Query(None),
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.get_user_vote(current_user["id"], date_proposal_id, destination_proposal_id)


@router.delete("/trips/{trip_id}/votes/me", status_code=204)
async def delete_my_vote(
    trip_id: str,
    date_proposal_id: Optional[str] = Query(None),
    destination_proposal_id: Optional[str] = Query(None),
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    service.delete_vote(current_user["id"], date_proposal_id, destination_proposal_id)
    return None


# Discussions

@router.get("/trips/{trip_id}/discussions", response_model=List[CommentResponse])
async def list_discussions(
    trip_id: str,
    date_proposal_id: Optional[str] = Query(None),
    destination_proposal_id: Optional[str] = Query(None),
    include_replies: bool = Query(True),
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.get_discussions(trip_id, date_proposal_id, destination_proposal_id, include_replies)


@router.post("/trips/{trip_id}/discussions", response_model=CommentResponse, status_code=201)
async def create_comment(
    trip_id: str,
    comment: CommentCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.create_comment(trip_id, current_user["id"], comment)


@router.put("/discussions/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: str,
    body: CommentUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("proposal_discussions", comment_id, current_user, supabase)
    return service.update_comment(comment_id, current_user["id"], body.comment_text)


@router.delete("/discussions/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: PlanningService = Depends(get_planning_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("proposal_discussions", comment_id, current_user, supabase)
    service.delete_comment(comment_id, current_user["id"])
    return None
