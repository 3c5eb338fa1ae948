from datetime import datetime
from typing import Optional

from uuid import UUID

from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    name: Optional[str] = None
    description: str = Field(min_length=1)
    points: int = Field(gt=0)

    timestamp: Optional[datetime] = None
    day_of_week: Optional[str] = None
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)

    template_id: Optional[UUID] = None
    profile_id: Optional[UUID] = None


class EventUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = Field(default=None, min_length=1)
    points: Optional[int] = Field(default=None, gt=0)

    timestamp: Optional[datetime] = None
    day_of_week: Optional[str] = None
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)

    template_id: Optional[UUID] = None
    profile_id: Optional[UUID] = None
    is_active: Optional[bool] = None


class EventOut(BaseModel):
    id: UUID
    profile_id: Optional[UUID] = None
    template_id: Optional[UUID] = None

    name: Optional[str] = None
    description: str
    normalized_description: Optional[str] = None

    points: int

    timestamp: datetime
    day_of_week: str
    day_of_month: int

    is_active: bool

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
