from datetime import datetime
from typing import Optional

from uuid import UUID

from pydantic import BaseModel


class RewardOut(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    point_cost: int
    image_url: Optional[str] = None
    is_active: bool

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RewardSummaryOut(BaseModel):
    id: UUID
    name: str
    point_cost: int
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class RewardWithStatusOut(RewardOut):
    is_redeemed: bool = False
    redeemed_at: Optional[datetime] = None
    is_affordable: bool = False
