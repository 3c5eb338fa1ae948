from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from doypal.config import Settings, get_settings
from doypal.db import get_db
from doypal.deps.capabilities import get_image_storage
from doypal.deps.profile import get_profile_scope
from doypal.schemas.reward import RewardOut, RewardWithStatusOut
from doypal.services import reward_service
from doypal.services.points_service import get_point_summary
from doypal.storage import ImageStorage


router = APIRouter(prefix="/api/rewards", tags=["rewards"])


def _serialize(reward) -> dict:
    return RewardOut.model_validate(reward).model_dump(mode="json")


@router.get("")
def list_rewards(
    profile_id: UUID | None = Depends(get_profile_scope),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    summary = get_point_summary(db, profile_id, tz_name=settings.timezone, use_view=settings.use_points_view)
    items = reward_service.list_rewards_with_status(
        db,
        profile_id=profile_id,
        available_points=summary["available_points"],
    )
    rewards = [
        RewardWithStatusOut(
            **RewardOut.model_validate(item["reward"]).model_dump(),
            is_redeemed=item["is_redeemed"],
            redeemed_at=item["redeemed_at"],
            is_affordable=item["is_affordable"],
        ).model_dump(mode="json")
        for item in items
    ]
    return {"rewards": rewards, "available_points": summary["available_points"]}


@router.post("")
def create_reward(
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    point_cost: int | None = Form(default=None),
    image: UploadFile | None = File(default=None),
    storage: ImageStorage = Depends(get_image_storage),
    db: Session = Depends(get_db),
):
    reward = reward_service.create_reward(
        db,
        storage,
        name=name,
        description=description,
        point_cost=point_cost,
        image=image,
    )
    return {"reward": _serialize(reward), "message": "Reward created successfully"}


@router.get("/{reward_id}")
def get_reward(reward_id: UUID, db: Session = Depends(get_db)):
    return {"reward": _serialize(reward_service.get_reward(db, reward_id))}


@router.patch("/{reward_id}")
def update_reward(
    reward_id: UUID,
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    point_cost: int | None = Form(default=None),
    is_active: bool | None = Form(default=None),
    image: UploadFile | None = File(default=None),
    storage: ImageStorage = Depends(get_image_storage),
    db: Session = Depends(get_db),
):
    reward = reward_service.update_reward(
        db,
        storage,
        reward_id,
        name=name,
        description=description,
        point_cost=point_cost,
        is_active=is_active,
        image=image,
    )
    return {"reward": _serialize(reward), "message": "Reward updated successfully"}


@router.delete("/{reward_id}")
def delete_reward(reward_id: UUID, db: Session = Depends(get_db)):
    reward_service.deactivate_reward(db, reward_id)
    return {"message": "Reward deactivated successfully"}
