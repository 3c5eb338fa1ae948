from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from doypal.config import Settings, get_settings
from doypal.db import get_db
from doypal.deps.profile import get_profile_scope
from doypal.schemas.points import PointSummaryOut
from doypal.services.points_service import get_point_summary


router = APIRouter(prefix="/api/points", tags=["points"])


@router.get("", response_model=PointSummaryOut)
def read_points(
    profile_id: UUID | None = Depends(get_profile_scope),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    return get_point_summary(
        db,
        profile_id,
        tz_name=settings.timezone,
        use_view=settings.use_points_view,
    )
