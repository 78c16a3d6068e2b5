from supabase import Client
from tripplanner.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from typing import Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

PROFILE_SUMMARY_COLUMNS = "id, username, full_name, avatar_url"


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def find_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Get profile by user ID, or None when it does not exist yet"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                return None
            return ProfileResponse(**result.data[0])
        except Exception as e:
            logger.error(f"Error fetching profile {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get profile by user ID"""
        profile = self.find_profile(user_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")
        return profile

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update the caller's own profile"""
        try:
            update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if profile_data.username is not None:
                update_data["username"] = profile_data.username
            if profile_data.full_name is not None:
                update_data["full_name"] = profile_data.full_name
            if profile_data.avatar_url is not None:
                update_data["avatar_url"] = profile_data.avatar_url

            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "duplicate" in error_message.lower() or "unique" in error_message.lower():
                raise HTTPException(status_code=400, detail="Username is already taken")
            raise HTTPException(status_code=500, detail=error_message)

    def get_profiles_by_ids(self, user_ids: List[str]) -> Dict[str, dict]:
        """Map user_id -> {username, full_name, avatar_url}. Missing profiles are simply absent."""
        ids = list({uid for uid in user_ids if uid})
        if not ids:
            return {}
        try:
            result = self.supabase.table("profiles")\
                .select(PROFILE_SUMMARY_COLUMNS)\
                .in_("id", ids)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching profiles: {e}")
            return {}
        return {
            p["id"]: {"username": p.get("username"), "full_name": p.get("full_name"), "avatar_url": p.get("avatar_url")}
            for p in (result.data or [])
        }
