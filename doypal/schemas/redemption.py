from datetime import datetime
from typing import Optional

from uuid import UUID

from pydantic import BaseModel

from doypal.schemas.reward import RewardSummaryOut


class RedemptionCreate(BaseModel):
    reward_id: Optional[UUID] = None
    profile_id: Optional[UUID] = None


class RedemptionAction(BaseModel):
    action: Optional[str] = None


class RedemptionOut(BaseModel):
    id: UUID
    reward_id: UUID
    profile_id: Optional[UUID] = None

    points_spent: int
    status: str

    redeemed_at: datetime
    withdrawn_at: Optional[datetime] = None

    reward: Optional[RewardSummaryOut] = None

    class Config:
        from_attributes = True
