from supabase import Client
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from typing import Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

TABLE = "profiles"


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _fetch(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(TABLE)\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        return result.data if result else None

    def get_or_create_profile(self, user_data: Dict[str, Any]) -> ProfileResponse:
        """Get the caller's profile, creating it from auth metadata on first access"""
        user_id = user_data["id"]
        try:
            data = self._fetch(user_id)
            if data:
                return ProfileResponse(**data)

            logger.info("No profile for user %s, creating one", user_id)
            metadata = user_data.get("user_metadata") or {}
            email = user_data.get("email") or metadata.get("email")
            result = self.supabase.table(TABLE).upsert({
                "id": user_id,
                "display_name": metadata.get("full_name") or metadata.get("name"),
                "default_emails": [email] if email else None,
                "is_default_email": False,
            }, on_conflict="id").execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create profile")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading profile for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_profile(self, user_data: Dict[str, Any], profile_data: ProfileUpdate) -> ProfileResponse:
        """Replace the given profile fields"""
        self.get_or_create_profile(user_data)
        try:
            update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if profile_data.display_name is not None:
                update_data["display_name"] = profile_data.display_name
            if profile_data.default_emails is not None:
                update_data["default_emails"] = [str(e) for e in profile_data.default_emails]
            if profile_data.is_default_email is not None:
                update_data["is_default_email"] = profile_data.is_default_email

            result = self.supabase.table(TABLE)\
                .update(update_data)\
                .eq("id", user_data["id"])\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
