from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InvitationCodeRequest(BaseModel):
    code: Optional[str] = None


class InvitationCreate(BaseModel):
    email: Optional[str] = None
    code: Optional[str] = Field(default=None, min_length=6)
    is_admin: bool = False
    expires_in_days: Optional[int] = Field(default=7, gt=0)


class InvitationRead(BaseModel):
    id: int
    code: str
    email: Optional[str] = None
    created_by: Optional[str] = None
    used_by: Optional[str] = None
    is_admin: bool
    status: str
    expires_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SetupUserRequest(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None


class ProfileRead(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    is_admin: bool

    model_config = ConfigDict(from_attributes=True)
