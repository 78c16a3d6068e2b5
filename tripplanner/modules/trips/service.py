from supabase import Client
from tripplanner.config import settings
from tripplanner.modules.trips.schemas import (
    TripCreate, TripUpdate, TripResponse, TripMemberResponse,
    InvitationResponse, InvitationAcceptResponse
)
from tripplanner.modules.profiles.service import ProfileService
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class TripService:
    def __init__(self, supabase: Client, lookup_client: Optional[Client] = None):
        self.supabase = supabase
        # Email -> user id resolution may need the service role client when RLS hides other users
        self.lookup_client = lookup_client or supabase

    def create_trip(self, trip_data: TripCreate, user_id: str) -> TripResponse:
        """Create a trip and add the creator as its owner"""
        try:
            result = self.supabase.table("trips").insert({
                "name": trip_data.name,
                "description": trip_data.description,
                "start_date": trip_data.start_date.isoformat() if trip_data.start_date else None,
                "end_date": trip_data.end_date.isoformat() if trip_data.end_date else None,
                "created_by": user_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create trip")
            trip = result.data[0]

            try:
                self.supabase.table("trip_members").insert({
                    "trip_id": trip["id"],
                    "user_id": user_id,
                    "role": "owner"
                }).execute()
            except Exception as e:
                logger.error(f"Trip member creation failed, removing trip {trip['id']}: {e}")
                self.supabase.table("trips").delete().eq("id", trip["id"]).execute()
                raise HTTPException(status_code=500, detail=str(e))

            logger.info(f"User {user_id} created trip {trip['id']}")
            return TripResponse(**trip)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Trip creation error: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_trips(self, user_id: str) -> List[TripResponse]:
        """List trips the user is a member of, newest first"""
        try:
            members_result = self.supabase.table("trip_members")\
                .select("trip_id")\
                .eq("user_id", user_id)\
                .execute()
            trip_ids = [m["trip_id"] for m in (members_result.data or [])]
            if not trip_ids:
                return []
            result = self.supabase.table("trips")\
                .select("*")\
                .in_("id", trip_ids)\
                .order("created_at", desc=True)\
                .execute()
            return [TripResponse(**trip) for trip in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_trip(self, trip_id: str) -> TripResponse:
        """Get trip by ID. Membership is checked by the caller."""
        try:
            result = self.supabase.table("trips")\
                .select("*")\
                .eq("id", trip_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Access denied or trip not found.")

            return TripResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching trip details: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_trip(self, trip_id: str, trip_data: TripUpdate) -> TripResponse:
        """Update trip"""
        try:
            update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if trip_data.name:
                update_data["name"] = trip_data.name
            if trip_data.description is not None:
                update_data["description"] = trip_data.description
            if trip_data.start_date is not None:
                update_data["start_date"] = trip_data.start_date.isoformat()
            if trip_data.end_date is not None:
                update_data["end_date"] = trip_data.end_date.isoformat()

            if "start_date" in update_data or "end_date" in update_data:
                current = self.get_trip(trip_id)
                start = update_data.get("start_date") or (current.start_date.isoformat() if current.start_date else None)
                end = update_data.get("end_date") or (current.end_date.isoformat() if current.end_date else None)
                if start and end and end < start:
                    raise HTTPException(status_code=422, detail="end_date must not be before start_date")

            result = self.supabase.table("trips")\
                .update(update_data)\
                .eq("id", trip_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Trip not found")

            return TripResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_trip(self, trip_id: str) -> bool:
        """Delete trip. Members and sub-resources cascade in the database."""
        try:
            result = self.supabase.table("trips")\
                .delete()\
                .eq("id", trip_id)\
                .execute()
            logger.info(f"Deleted trip {trip_id}")
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_members(self, trip_id: str) -> List[TripMemberResponse]:
        """List trip members with their profile names"""
        try:
            result = self.supabase.table("trip_members")\
                .select("*")\
                .eq("trip_id", trip_id)\
                .order("joined_at")\
                .execute()
            members = result.data or []
            profiles = ProfileService(self.supabase).get_profiles_by_ids([m["user_id"] for m in members])
            return [
                TripMemberResponse(
                    trip_id=m["trip_id"],
                    user_id=m["user_id"],
                    role=m["role"],
                    joined_at=m.get("joined_at"),
                    **profiles.get(m["user_id"], {})
                )
                for m in members
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_member_ids(self, trip_id: str) -> List[str]:
        try:
            result = self.supabase.table("trip_members")\
                .select("user_id")\
                .eq("trip_id", trip_id)\
                .execute()
            return [m["user_id"] for m in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_member(self, trip_id: str, user_id: str) -> Optional[dict]:
        result = self.supabase.table("trip_members")\
            .select("*")\
            .eq("trip_id", trip_id)\
            .eq("user_id", user_id)\
            .execute()
        return result.data[0] if result.data else None

    def invite_member_by_email(self, trip_id: str, inviter_user_id: str, invitee_email: str) -> TripMemberResponse:
        """Add an existing user to the trip by email. Only owners and co-owners may invite."""
        try:
            inviter = self._get_member(trip_id, inviter_user_id)
            if not inviter:
                raise HTTPException(
                    status_code=403,
                    detail="Permission denied: Inviter not found or not a member of the trip."
                )
            if inviter["role"] not in ("owner", "co-owner"):
                raise HTTPException(
                    status_code=403,
                    detail="Permission denied: Only trip owners or co-owners can invite members."
                )

            lookup = self.lookup_client.rpc("get_user_id_by_email", {"email": invitee_email}).execute()
            invitee_user_id = lookup.data
            if isinstance(invitee_user_id, list):
                invitee_user_id = invitee_user_id[0] if invitee_user_id else None
            if not invitee_user_id:
                raise HTTPException(status_code=404, detail=f"User with email {invitee_email} not found.")

            if self._get_member(trip_id, invitee_user_id):
                raise HTTPException(status_code=400, detail="User is already a member of this trip.")

            result = self.supabase.table("trip_members").insert({
                "trip_id": trip_id,
                "user_id": invitee_user_id,
                "role": "member"
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add member")

            logger.info(f"User {inviter_user_id} added {invitee_user_id} to trip {trip_id}")
            member = result.data[0]
            profile = ProfileService(self.supabase).get_profiles_by_ids([invitee_user_id]).get(invitee_user_id, {})
            return TripMemberResponse(
                trip_id=member["trip_id"],
                user_id=member["user_id"],
                role=member["role"],
                joined_at=member.get("joined_at"),
                **profile
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding new member to trip: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def create_invitation(self, trip_id: str, email: Optional[str] = None) -> InvitationResponse:
        """Create a shareable invitation link for the trip"""
        try:
            result = self.supabase.rpc("create_trip_invitation", {
                "p_trip_id": trip_id,
                "p_email": email
            }).execute()
            data = result.data[0] if isinstance(result.data, list) else result.data
            if not data:
                raise HTTPException(status_code=500, detail="Failed to create invitation")
            join_url = f"{settings.app_base_url.rstrip('/')}/join-trip?token={data['token']}"
            return InvitationResponse(
                invitation_id=data["invitation_id"],
                token=data["token"],
                expires_at=data["expires_at"],
                join_url=join_url
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating invitation for trip {trip_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def accept_invitation(self, token: str, user_id: str) -> InvitationAcceptResponse:
        """Redeem an invitation token for the current user"""
        try:
            result = self.supabase.rpc("use_trip_invitation", {
                "p_token": token,
                "p_user_id": user_id
            }).execute()
            data = result.data[0] if isinstance(result.data, list) else result.data
            if not data or not data.get("success"):
                message = (data or {}).get("error_message") or "Failed to accept invitation."
                raise HTTPException(status_code=400, detail=message)
            logger.info(f"User {user_id} joined trip {data['trip_id']} via invitation")
            return InvitationAcceptResponse(trip_id=data["trip_id"], message="Joined trip successfully")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error accepting invitation: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_member_role(
        self, trip_id: str, user_id: str, role: str, actor_role: str
    ) -> TripMemberResponse:
        """Change a member's role, keeping at least one owner.

        Only owners may grant the owner role or change another owner's role.
        """
        try:
            member = self._get_member(trip_id, user_id)
            if not member:
                raise HTTPException(status_code=404, detail="Member not found")
            if actor_role != "owner" and (role == "owner" or member["role"] == "owner"):
                raise HTTPException(status_code=403, detail="Only trip owners can grant or change the owner role")
            if member["role"] == "owner" and role != "owner" and self._count_owners(trip_id) <= 1:
                raise HTTPException(status_code=400, detail="A trip must keep at least one owner")

            result = self.supabase.table("trip_members")\
                .update({"role": role})\
                .eq("trip_id", trip_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Member not found")
            updated = result.data[0]
            profile = ProfileService(self.supabase).get_profiles_by_ids([user_id]).get(user_id, {})
            return TripMemberResponse(
                trip_id=updated["trip_id"],
                user_id=updated["user_id"],
                role=updated["role"],
                joined_at=updated.get("joined_at"),
                **profile
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_member(self, trip_id: str, user_id: str, actor_role: str, leaving: bool = False) -> bool:
        """Remove a member (or leave). The last owner cannot be removed.

        Only owners may remove another owner.
        """
        try:
            member = self._get_member(trip_id, user_id)
            if not member:
                raise HTTPException(status_code=404, detail="Member not found")
            if not leaving and member["role"] == "owner" and actor_role != "owner":
                raise HTTPException(status_code=403, detail="Only trip owners can remove an owner")
            if member["role"] == "owner" and self._count_owners(trip_id) <= 1:
                raise HTTPException(status_code=400, detail="The last owner cannot leave the trip")

            result = self.supabase.table("trip_members")\
                .delete()\
                .eq("trip_id", trip_id)\
                .eq("user_id", user_id)\
                .execute()
            return len(result.data) > 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _count_owners(self, trip_id: str) -> int:
        result = self.supabase.table("trip_members")\
            .select("user_id")\
            .eq("trip_id", trip_id)\
            .eq("role", "owner")\
            .execute()
        return len(result.data or [])
