import hashlib
import time
from supabase import Client
from app.core.errors import AuthenticationError
from app.modules.auth.schemas import OAuthUrlResponse
from fastapi import HTTPException
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_oauth_url(self, provider: str = "google", redirect_to: Optional[str] = None) -> OAuthUrlResponse:
        """Build the provider sign-in URL; the browser completes the flow with Supabase directly."""
        try:
            credentials: Dict[str, Any] = {"provider": provider}
            if redirect_to:
                credentials["options"] = {"redirect_to": redirect_to}
            response = self.supabase.auth.sign_in_with_oauth(credentials)
            if not response or not response.url:
                raise HTTPException(status_code=500, detail="Failed to start OAuth sign-in")
            return OAuthUrlResponse(provider=provider, url=response.url)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"OAuth sign-in failed: {str(e)}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise AuthenticationError("Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except AuthenticationError:
            raise
        except Exception as e:
            error_msg = str(e)
            logger.warning("Token verification failed: %s", error_msg)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise AuthenticationError("Invalid or expired token")
            raise AuthenticationError("Authentication failed")

    def logout(self, token: str) -> bool:
        """Drop the cached identity; Supabase JWTs are stateless and expire on their own."""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning("Supabase sign_out failed: %s", e)
            return False
