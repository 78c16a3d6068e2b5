from supabase import Client
from tripplanner.core.dependencies import TRIP_ADMIN_ROLES
from tripplanner.modules.planning.schemas import (
    DateProposalCreate, DateProposalUpdate, DateProposalResponse,
    DestinationProposalCreate, DestinationProposalUpdate, DestinationProposalResponse,
    EnhancedDateProposal, EnhancedDestinationProposal, ProposalStats,
    VoteCast, VoteResponse, CommentCreate, CommentResponse
)
from tripplanner.modules.planning.stats import compute_proposal_stats, empty_stats, group_by, find_user_vote
from tripplanner.modules.profiles.service import ProfileService
from typing import Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _target(date_proposal_id: Optional[str], destination_proposal_id: Optional[str]):
    """(foreign key column, id) for exactly one proposal"""
    if bool(date_proposal_id) == bool(destination_proposal_id):
        raise HTTPException(
            status_code=422,
            detail="Provide exactly one of date_proposal_id or destination_proposal_id"
        )
    if date_proposal_id:
        return "date_proposal_id", date_proposal_id
    return "destination_proposal_id", destination_proposal_id


class PlanningService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)

    # Shared lookups

    def _get_row(self, table: str, record_id: str, label: str) -> dict:
        result = self.supabase.table(table)\
            .select("*")\
            .eq("id", record_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return result.data[0]

    def _votes_by_proposal(self, column: str, proposal_ids: List[str]) -> Optional[Dict[str, List[dict]]]:
        """Votes grouped per proposal, or None when they could not be loaded"""
        if not proposal_ids:
            return {}
        try:
            result = self.supabase.table("proposal_votes")\
                .select("*")\
                .in_(column, proposal_ids)\
                .execute()
            return group_by(result.data or [], column)
        except Exception as e:
            logger.error(f"Error fetching proposal votes, falling back to empty stats: {e}")
            return None

    def _discussion_counts(self, column: str, proposal_ids: List[str]) -> Dict[str, int]:
        if not proposal_ids:
            return {}
        try:
            result = self.supabase.table("proposal_discussions")\
                .select(column)\
                .in_(column, proposal_ids)\
                .execute()
            return {pid: len(rows) for pid, rows in group_by(result.data or [], column).items()}
        except Exception as e:
            logger.error(f"Error counting proposal discussions: {e}")
            return {}

    def _enrichment(self, column: str, rows: List[dict], current_user_id: Optional[str]) -> List[dict]:
        """Profile, vote stats, caller's vote and comment count per proposal row"""
        ids = [r["id"] for r in rows]
        votes = self._votes_by_proposal(column, ids)
        counts = self._discussion_counts(column, ids)
        profiles = self.profiles.get_profiles_by_ids(list({r["proposed_by"] for r in rows}))
        extras = []
        for row in rows:
            proposal_votes = (votes or {}).get(row["id"], [])
            extras.append({
                "proposed_by_profile": profiles.get(row["proposed_by"]),
                "vote_stats": compute_proposal_stats(proposal_votes) if votes is not None else empty_stats(),
                "user_vote": find_user_vote(proposal_votes, current_user_id),
                "discussion_count": counts.get(row["id"], 0),
            })
        return extras

    def _check_can_modify(self, row: dict, user_id: str, role: Optional[str]) -> None:
        if row["proposed_by"] != user_id and role not in TRIP_ADMIN_ROLES:
            raise HTTPException(
                status_code=403,
                detail="Only the proposer or a trip owner can change this proposal"
            )

    # Date proposals

    def create_date_proposal(self, trip_id: str, user_id: str, proposal: DateProposalCreate) -> DateProposalResponse:
        try:
            result = self.supabase.table("date_proposals").insert({
                "trip_id": trip_id,
                "proposed_by": user_id,
                "title": proposal.title,
                "start_date": proposal.start_date.isoformat(),
                "end_date": proposal.end_date.isoformat(),
                "notes": proposal.notes
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create date proposal")
            logger.info(f"User {user_id} proposed dates on trip {trip_id}")
            return DateProposalResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating date proposal: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_date_proposals(self, trip_id: str, current_user_id: Optional[str] = None) -> List[EnhancedDateProposal]:
        """Date proposals of a trip, newest first, with votes, comments and linked destinations"""
        try:
            result = self.supabase.table("date_proposals")\
                .select("*")\
                .eq("trip_id", trip_id)\
                .order("created_at", desc=True)\
                .execute()
            rows = result.data or []
            if not rows:
                return []
            linked = self.supabase.table("destination_proposals")\
                .select("*")\
                .in_("date_proposal_id", [r["id"] for r in rows])\
                .execute()
            linked_by_date = group_by(linked.data or [], "date_proposal_id")
            extras = self._enrichment("date_proposal_id", rows, current_user_id)
            return [
                EnhancedDateProposal(**row, **extra, linked_destinations=linked_by_date.get(row["id"], []))
                for row, extra in zip(rows, extras)
            ]
        except Exception as e:
            logger.error(f"Error fetching date proposals: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_date_proposal(
        self, proposal_id: str, updates: DateProposalUpdate, user_id: str, role: Optional[str] = None
    ) -> DateProposalResponse:
        """Update a date proposal. Finalising it also sets the trip's dates."""
        try:
            current = self._get_row("date_proposals", proposal_id, "Date proposal")
            self._check_can_modify(current, user_id, role)

            update_data = {"updated_at": _now()}
            for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items():
                update_data[field] = value.isoformat() if hasattr(value, "isoformat") else value
            start = update_data.get("start_date", str(current["start_date"]))
            end = update_data.get("end_date", str(current["end_date"]))
            if end < start:
                raise HTTPException(status_code=422, detail="end_date must not be before start_date")

            result = self.supabase.table("date_proposals")\
                .update(update_data)\
                .eq("id", proposal_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Date proposal not found")
            proposal = result.data[0]

            if updates.is_finalized:
                self.supabase.table("trips")\
                    .update({"start_date": start, "end_date": end, "updated_at": _now()})\
                    .eq("id", proposal["trip_id"])\
                    .execute()
                logger.info(f"Date proposal {proposal_id} finalised for trip {proposal['trip_id']}")

            return DateProposalResponse(**proposal)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating date proposal: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_date_proposal(self, proposal_id: str, user_id: str, role: Optional[str] = None) -> bool:
        try:
            current = self._get_row("date_proposals", proposal_id, "Date proposal")
            self._check_can_modify(current, user_id, role)
            result = self.supabase.table("date_proposals")\
                .delete()\
                .eq("id", proposal_id)\
                .execute()
            return len(result.data) > 0
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting date proposal: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    # Destination proposals

    def create_destination_proposal(
        self, trip_id: str, user_id: str, proposal: DestinationProposalCreate
    ) -> DestinationProposalResponse:
        try:
            if proposal.date_proposal_id:
                linked = self._get_row("date_proposals", proposal.date_proposal_id, "Date proposal")
                if linked["trip_id"] != trip_id:
                    raise HTTPException(status_code=400, detail="Date proposal belongs to another trip")

            result = self.supabase.table("destination_proposals").insert({
                "trip_id": trip_id,
                "proposed_by": user_id,
                "destination_name": proposal.destination_name,
                "destination_description": proposal.destination_description,
                "destination_notes": proposal.destination_notes,
                "date_proposal_id": proposal.date_proposal_id
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create destination proposal")
            return DestinationProposalResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating destination proposal: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_destination_proposals(
        self, trip_id: str, current_user_id: Optional[str] = None
    ) -> List[EnhancedDestinationProposal]:
        try:
            result = self.supabase.table("destination_proposals")\
                .select("*")\
                .eq("trip_id", trip_id)\
                .order("created_at", desc=True)\
                .execute()
            rows = result.data or []
            if not rows:
                return []
            date_ids = list({r["date_proposal_id"] for r in rows if r.get("date_proposal_id")})
            dates_by_id = {}
            if date_ids:
                dates = self.supabase.table("date_proposals")\
                    .select("*")\
                    .in_("id", date_ids)\
                    .execute()
                dates_by_id = {d["id"]: d for d in (dates.data or [])}
            extras = self._enrichment("destination_proposal_id", rows, current_user_id)
            return [
                EnhancedDestinationProposal(
                    **row, **extra, linked_date_proposal=dates_by_id.get(row.get("date_proposal_id"))
                )
                for row, extra in zip(rows, extras)
            ]
        except Exception as e:
            logger.error(f"Error fetching destination proposals: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_destination_proposal(
        self, proposal_id: str, updates: DestinationProposalUpdate, user_id: str, role: Optional[str] = None
    ) -> DestinationProposalResponse:
        try:
            current = self._get_row("destination_proposals", proposal_id, "Destination proposal")
            self._check_can_modify(current, user_id, role)
            update_data = {"updated_at": _now(), **updates.model_dump(exclude_unset=True, exclude_none=True)}
            result = self.supabase.table("destination_proposals")\
                .update(update_data)\
                .eq("id", proposal_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Destination proposal not found")
            return DestinationProposalResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating destination proposal: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_destination_proposal(self, proposal_id: str, user_id: str, role: Optional[str] = None) -> bool:
        try:
            current = self._get_row("destination_proposals", proposal_id, "Destination proposal")
            self._check_can_modify(current, user_id, role)
            result = self.supabase.table("destination_proposals")\
                .delete()\
                .eq("id", proposal_id)\
                .execute()
            return len(result.data) > 0
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting destination proposal: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    # Votes

    def cast_vote(self, trip_id: str, user_id: str, vote: VoteCast) -> VoteResponse:
        """Create or replace the user's vote on one proposal"""
        column, proposal_id = _target(vote.date_proposal_id, vote.destination_proposal_id)
        table = "date_proposals" if column == "date_proposal_id" else "destination_proposals"
        try:
            proposal = self._get_row(table, proposal_id, "Proposal")
            if proposal["trip_id"] != trip_id:
                raise HTTPException(status_code=404, detail="Proposal not found")

            result = self.supabase.table("proposal_votes").upsert({
                "trip_id": trip_id,
                "user_id": user_id,
                column: proposal_id,
                "vote_type": vote.vote_type,
                "updated_at": _now()
            }, on_conflict=f"user_id,{column}").execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to cast vote")
            return VoteResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error casting vote: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_vote(
        self, user_id: str, date_proposal_id: Optional[str] = None, destination_proposal_id: Optional[str] = None
    ) -> Optional[VoteResponse]:
        column, proposal_id = _target(date_proposal_id, destination_proposal_id)
        try:
            result = self.supabase.table("proposal_votes")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq(column, proposal_id)\
                .limit(1)\
                .execute()
            return VoteResponse(**result.data[0]) if result.data else None
        except Exception as e:
            logger.error(f"Error fetching user vote: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_vote(
        self, user_id: str, date_proposal_id: Optional[str] = None, destination_proposal_id: Optional[str] = None
    ) -> bool:
        column, proposal_id = _target(date_proposal_id, destination_proposal_id)
        try:
            result = self.supabase.table("proposal_votes")\
                .delete()\
                .eq("user_id", user_id)\
                .eq(column, proposal_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting vote: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_proposal_stats(
        self, date_proposal_id: Optional[str] = None, destination_proposal_id: Optional[str] = None
    ) -> ProposalStats:
        """Vote tally for one proposal; zero stats if the votes can't be read"""
        column, proposal_id = _target(date_proposal_id, destination_proposal_id)
        votes = self._votes_by_proposal(column, [proposal_id])
        if votes is None:
            return ProposalStats()
        return ProposalStats(**compute_proposal_stats(votes.get(proposal_id, [])))

    # Discussions

    def _attach_profiles(self, comments: List[dict]) -> List[dict]:
        profiles = self.profiles.get_profiles_by_ids(list({c["user_id"] for c in comments}))
        return [{**c, "user_profile": profiles.get(c["user_id"])} for c in comments]

    def create_comment(self, trip_id: str, user_id: str, comment: CommentCreate) -> CommentResponse:
        """Post a comment. Replies to a reply are attached to the top-level comment."""
        try:
            insert_data = {
                "trip_id": trip_id,
                "user_id": user_id,
                "comment_text": comment.comment_text,
                "date_proposal_id": comment.date_proposal_id,
                "destination_proposal_id": comment.destination_proposal_id,
                "parent_comment_id": None
            }
            if comment.parent_comment_id:
                parent = self._get_row("proposal_discussions", comment.parent_comment_id, "Comment")
                if parent["trip_id"] != trip_id:
                    raise HTTPException(status_code=404, detail="Comment not found")
                insert_data["parent_comment_id"] = parent.get("parent_comment_id") or parent["id"]
                insert_data["date_proposal_id"] = parent.get("date_proposal_id")
                insert_data["destination_proposal_id"] = parent.get("destination_proposal_id")

            result = self.supabase.table("proposal_discussions").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create comment")
            return CommentResponse(**self._attach_profiles(result.data)[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating comment: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_discussions(
        self,
        trip_id: str,
        date_proposal_id: Optional[str] = None,
        destination_proposal_id: Optional[str] = None,
        include_replies: bool = True
    ) -> List[CommentResponse]:
        """Top-level comments oldest first, optionally with their replies.

        Without a proposal id every top-level comment of the trip is returned.
        """
        try:
            query = self.supabase.table("proposal_discussions")\
                .select("*")\
                .eq("trip_id", trip_id)\
                .is_("parent_comment_id", "null")
            if date_proposal_id:
                query = query.eq("date_proposal_id", date_proposal_id)
            elif destination_proposal_id:
                query = query.eq("destination_proposal_id", destination_proposal_id)
            result = query.order("created_at").execute()
            comments = self._attach_profiles(result.data or [])

            replies_by_parent: Dict[str, List[dict]] = {}
            if include_replies and comments:
                replies = self.supabase.table("proposal_discussions")\
                    .select("*")\
                    .in_("parent_comment_id", [c["id"] for c in comments])\
                    .order("created_at")\
                    .execute()
                replies_by_parent = group_by(self._attach_profiles(replies.data or []), "parent_comment_id")

            return [CommentResponse(**c, replies=replies_by_parent.get(c["id"], [])) for c in comments]
        except Exception as e:
            logger.error(f"Error fetching discussions: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def _get_own_comment(self, comment_id: str, user_id: str, action: str) -> dict:
        comment = self._get_row("proposal_discussions", comment_id, "Comment")
        if comment["user_id"] != user_id:
            raise HTTPException(status_code=403, detail=f"You can only {action} your own comments")
        return comment

    def update_comment(self, comment_id: str, user_id: str, comment_text: str) -> CommentResponse:
        try:
            self._get_own_comment(comment_id, user_id, "edit")
            result = self.supabase.table("proposal_discussions")\
                .update({"comment_text": comment_text, "is_edited": True, "updated_at": _now()})\
                .eq("id", comment_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Comment not found")
            return CommentResponse(**self._attach_profiles(result.data)[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating comment: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_comment(self, comment_id: str, user_id: str) -> bool:
        """Delete one of the user's comments; its replies cascade"""
        try:
            self._get_own_comment(comment_id, user_id, "delete")
            result = self.supabase.table("proposal_discussions")\
                .delete()\
                .eq("id", comment_id)\
                .execute()
            return len(result.data) > 0
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting comment: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def discussion_count(
        self, date_proposal_id: Optional[str] = None, destination_proposal_id: Optional[str] = None
    ) -> int:
        column, proposal_id = _target(date_proposal_id, destination_proposal_id)
        return self._discussion_counts(column, [proposal_id]).get(proposal_id, 0)
