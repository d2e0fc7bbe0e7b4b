from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional, List
from datetime import datetime


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    default_emails: Optional[List[EmailStr]] = None
    is_default_email: Optional[bool] = None


class ProfileResponse(BaseModel):
    id: str
    display_name: Optional[str] = None
    default_emails: Optional[List[str]] = None
    is_default_email: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
