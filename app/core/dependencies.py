"""
Core dependencies for route protection and per-request Supabase clients
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.errors import AuthenticationError
from app.database.supabase_client import SupabaseClient, get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches us and becomes a 401 envelope
security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing authorization header")
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def get_user_supabase(
    token: str = Depends(get_bearer_token),
    user_data: dict = Depends(get_current_user_id),
) -> Client:
    """Supabase client acting as the caller, so RLS scopes every query to their rows."""
    return SupabaseClient.get_user_client(token)
