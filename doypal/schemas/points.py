from typing import Dict, List, Optional

from uuid import UUID

from pydantic import BaseModel


class PointSummaryOut(BaseModel):
    profile_id: Optional[UUID] = None

    # earned from active events
    total_points: int
    weekly_points: int
    monthly_points: int

    # debited by active redemptions
    spent_points: int
    available_points: int


class AdminPointsOut(BaseModel):
    pointSummaries: List[PointSummaryOut]
    pointsByDay: Dict[str, int]
