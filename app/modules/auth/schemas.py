from pydantic import BaseModel
from typing import Optional, Dict, Any


class OAuthUrlResponse(BaseModel):
    provider: str
    url: str


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    app_metadata: Dict[str, Any] = {}
