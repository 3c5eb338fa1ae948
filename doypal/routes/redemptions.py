from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from doypal.config import Settings, get_settings
from doypal.db import get_db
from doypal.deps.profile import get_profile_scope
from doypal.models.redemption import Redemption
from doypal.schemas.redemption import RedemptionAction, RedemptionCreate, RedemptionOut
from doypal.services import redemption_service


router = APIRouter(prefix="/api/redemptions", tags=["redemptions"])


def _serialize(redemption: Redemption) -> dict:
    return RedemptionOut.model_validate(redemption).model_dump(mode="json")


@router.get("")
def list_redemptions(
    profile_id: UUID | None = Depends(get_profile_scope),
    include_withdrawn: bool = False,
    db: Session = Depends(get_db),
):
    redemptions = redemption_service.list_redemptions(
        db,
        profile_id=profile_id,
        include_withdrawn=include_withdrawn,
    )
    return {"redemptions": [_serialize(r) for r in redemptions]}


@router.post("")
def redeem(
    payload: RedemptionCreate,
    profile_id: UUID | None = Depends(get_profile_scope),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    result = redemption_service.redeem_reward(
        db,
        reward_id=payload.reward_id,
        profile_id=payload.profile_id or profile_id,
        use_view=settings.use_points_view,
    )
    result["redemption"] = _serialize(result["redemption"])
    return result


@router.get("/{redemption_id}")
def get_redemption(redemption_id: UUID, db: Session = Depends(get_db)):
    redemption = db.query(Redemption).filter(Redemption.id == redemption_id).first()
    if not redemption:
        raise HTTPException(status_code=404, detail="Redemption not found")
    return {"redemption": _serialize(redemption)}


@router.patch("/{redemption_id}")
def update_redemption(redemption_id: UUID, payload: RedemptionAction, db: Session = Depends(get_db)):
    if payload.action != "withdraw":
        raise HTTPException(status_code=400, detail="Invalid action. Only 'withdraw' is supported")
    return redemption_service.withdraw_redemption(db, redemption_id)
