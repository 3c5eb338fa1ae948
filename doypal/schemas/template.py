from datetime import datetime
from typing import Optional

from uuid import UUID

from pydantic import BaseModel


class TemplateCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    default_points: Optional[int] = None
    frequency: Optional[int] = None
    ai_confidence: Optional[float] = None


class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    default_points: Optional[int] = None
    frequency: Optional[int] = None
    ai_confidence: Optional[float] = None
    is_active: Optional[bool] = None


class TemplateOut(BaseModel):
    id: UUID
    name: str
    description: str
    default_points: int

    frequency: int
    last_seen: Optional[datetime] = None

    ai_confidence: Optional[float] = None
    generation_batch: Optional[str] = None

    is_active: bool

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
