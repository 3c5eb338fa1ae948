from datetime import datetime
from typing import Optional

from uuid import UUID

from pydantic import BaseModel


class ProfileCreate(BaseModel):
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileOut(BaseModel):
    id: UUID
    name: str
    avatar_url: Optional[str] = None
    is_active: bool

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
