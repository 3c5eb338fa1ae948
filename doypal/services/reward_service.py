import logging

from fastapi import HTTPException, UploadFile
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from doypal.models.redemption import ACTIVE, Redemption
from doypal.models.reward import Reward
from doypal.storage import (
    ALLOWED_IMAGE_TYPES,
    MAX_IMAGE_BYTES,
    ImageStorage,
    build_image_name,
    name_from_url,
)

logger = logging.getLogger(__name__)


def get_reward(db: Session, reward_id) -> Reward:
    reward = db.query(Reward).filter(Reward.id == reward_id).first()
    if not reward:
        raise HTTPException(status_code=404, detail="Reward not found")
    return reward


def list_rewards_with_status(db: Session, *, profile_id=None, available_points: int | None = None) -> list[dict]:
    rewards = Reward.active(db).order_by(Reward.point_cost.asc(), Reward.name.asc()).all()

    q = (
        db.query(Redemption.reward_id, func.max(Redemption.redeemed_at))
        .filter(Redemption.status == ACTIVE)
    )
    if profile_id is not None:
        q = q.filter(Redemption.profile_id == profile_id)
    last_redeemed = dict(q.group_by(Redemption.reward_id).all())

    items = []
    for reward in rewards:
        redeemed_at = last_redeemed.get(reward.id)
        items.append(
            {
                "reward": reward,
                "is_redeemed": redeemed_at is not None,
                "redeemed_at": redeemed_at,
                "is_affordable": available_points is not None and available_points >= reward.point_cost,
            }
        )
    return items


# ============================================================
# IMAGES
# ============================================================
def _read_image(image: UploadFile | None) -> bytes | None:
    if image is None or not image.filename:
        return None

    # one byte past the limit is enough to reject oversized uploads
    payload = image.file.read(MAX_IMAGE_BYTES + 1)
    if not payload:
        return None
    if len(payload) > MAX_IMAGE_BYTES:
        raise HTTPException(status_code=400, detail="Image size must be less than 1MB")
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail="Image must be JPEG, PNG, or WebP format")
    return payload


def _upload(storage: ImageStorage, image: UploadFile, payload: bytes) -> str:
    name = build_image_name(image.filename)
    try:
        return storage.upload(name, payload, image.content_type)
    except Exception:
        logger.exception("reward image upload failed", extra={"image": name})
        raise HTTPException(status_code=500, detail="Failed to upload image")


def _remove_quietly(storage: ImageStorage, url: str | None) -> None:
    name = name_from_url(url)
    if not name:
        return
    try:
        storage.remove(name)
    except Exception:
        logger.warning("reward image cleanup failed", extra={"image": name}, exc_info=True)


# ============================================================
# CREATE / UPDATE / DEACTIVATE
# ============================================================
def create_reward(
    db: Session,
    storage: ImageStorage,
    *,
    name: str | None,
    description: str | None,
    point_cost: int | None,
    image: UploadFile | None = None,
) -> Reward:
    if not name or not name.strip() or not point_cost or point_cost <= 0:
        raise HTTPException(status_code=400, detail="Missing required fields: name and valid point_cost")

    payload = _read_image(image)
    image_url = _upload(storage, image, payload) if payload else None

    reward = Reward(
        name=name.strip(),
        description=description or None,
        point_cost=point_cost,
        image_url=image_url,
        is_active=True,
    )
    db.add(reward)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        # do not leave an orphaned object behind
        _remove_quietly(storage, image_url)
        raise
    db.refresh(reward)

    logger.info("reward created", extra={"reward_id": str(reward.id), "point_cost": reward.point_cost})
    return reward


def update_reward(
    db: Session,
    storage: ImageStorage,
    reward_id,
    *,
    name: str | None = None,
    description: str | None = None,
    point_cost: int | None = None,
    is_active: bool | None = None,
    image: UploadFile | None = None,
) -> Reward:
    reward = get_reward(db, reward_id)

    if point_cost is not None and point_cost <= 0:
        raise HTTPException(status_code=400, detail="point_cost must be greater than 0")

    old_url = new_url = None
    payload = _read_image(image)
    if payload:
        old_url = reward.image_url
        new_url = _upload(storage, image, payload)
        reward.image_url = new_url

    if name:
        reward.name = name.strip()
    if description is not None:
        reward.description = description or None
    # redemptions keep their own points_spent snapshot
    if point_cost is not None:
        reward.point_cost = point_cost
    if is_active is not None:
        reward.is_active = is_active

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        # the row still points at the previous image
        _remove_quietly(storage, new_url)
        raise
    db.refresh(reward)

    if new_url:
        _remove_quietly(storage, old_url)
    return reward


def deactivate_reward(db: Session, reward_id) -> Reward:
    reward = get_reward(db, reward_id)
    reward.is_active = False
    db.commit()
    db.refresh(reward)

    logger.info("reward deactivated", extra={"reward_id": str(reward.id)})
    return reward
