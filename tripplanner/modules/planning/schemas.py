from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Literal
from datetime import date, datetime
from tripplanner.modules.profiles.schemas import ProfileSummary

VoteType = Literal["available", "maybe", "unavailable"]


class ProposalStats(BaseModel):
    upvotes: int = 0
    downvotes: int = 0
    neutral_votes: int = 0
    total_votes: int = 0
    net_score: int = 0


# Date proposals

class DateProposalCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    start_date: date
    end_date: date
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_date_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class DateProposalUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    is_finalized: Optional[bool] = None

    @model_validator(mode="after")
    def check_date_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class DateProposalResponse(BaseModel):
    id: str
    trip_id: str
    proposed_by: str
    title: str
    start_date: date
    end_date: date
    notes: Optional[str] = None
    is_finalized: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Destination proposals

class DestinationProposalCreate(BaseModel):
    destination_name: str = Field(min_length=1, max_length=200)
    destination_description: Optional[str] = None
    destination_notes: Optional[str] = None
    date_proposal_id: Optional[str] = None


class DestinationProposalUpdate(BaseModel):
    destination_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    destination_description: Optional[str] = None
    destination_notes: Optional[str] = None
    date_proposal_id: Optional[str] = None
    is_finalized: Optional[bool] = None


class DestinationProposalResponse(BaseModel):
    id: str
    trip_id: str
    date_proposal_id: Optional[str] = None
    proposed_by: str
    destination_name: str
    destination_description: Optional[str] = None
    destination_notes: Optional[str] = None
    is_finalized: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EnhancedDateProposal(DateProposalResponse):
    proposed_by_profile: Optional[ProfileSummary] = None
    vote_stats: ProposalStats = ProposalStats()
    user_vote: Optional[VoteType] = None
    discussion_count: int = 0
    linked_destinations: List[DestinationProposalResponse] = []


class EnhancedDestinationProposal(DestinationProposalResponse):
    proposed_by_profile: Optional[ProfileSummary] = None
    vote_stats: ProposalStats = ProposalStats()
    user_vote: Optional[VoteType] = None
    discussion_count: int = 0
    linked_date_proposal: Optional[DateProposalResponse] = None


# Votes

class VoteCast(BaseModel):
    date_proposal_id: Optional[str] = None
    destination_proposal_id: Optional[str] = None
    vote_type: VoteType

    @model_validator(mode="after")
    def require_single_target(self):
        if bool(self.date_proposal_id) == bool(self.destination_proposal_id):
            raise ValueError("Provide exactly one of date_proposal_id or destination_proposal_id")
        return self


class VoteResponse(BaseModel):
    id: str
    trip_id: str
    date_proposal_id: Optional[str] = None
    destination_proposal_id: Optional[str] = None
    user_id: str
    vote_type: VoteType
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Discussions

class CommentCreate(BaseModel):
    comment_text: str = Field(min_length=1, max_length=5000)
    date_proposal_id: Optional[str] = None
    destination_proposal_id: Optional[str] = None
    parent_comment_id: Optional[str] = None


class CommentUpdate(BaseModel):
    comment_text: str = Field(min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    id: str
    trip_id: str
    date_proposal_id: Optional[str] = None
    destination_proposal_id: Optional[str] = None
    parent_comment_id: Optional[str] = None
    user_id: str
    comment_text: str
    is_edited: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user_profile: Optional[ProfileSummary] = None
    replies: List["CommentResponse"] = []
