from fastapi import APIRouter, Depends
from app.modules.auth.schemas import OAuthUrlResponse, CurrentUserResponse
from app.modules.auth.service import AuthService
from app.core.dependencies import get_auth_service, get_bearer_token, get_current_user_id
from typing import Dict, Optional

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/oauth/google", response_model=OAuthUrlResponse)
async def google_sign_in(
    redirect_to: Optional[str] = None,
    service: AuthService = Depends(get_auth_service)
):
    """Return the Google sign-in URL to redirect the browser to"""
    return service.get_oauth_url("google", redirect_to=redirect_to)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(current_user: Dict = Depends(get_current_user_id)):
    """Get current authenticated user."""
    return current_user
