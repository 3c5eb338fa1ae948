import logging

from fastapi import HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from doypal.db import utcnow
from doypal.models.profile import Profile
from doypal.models.redemption import ACTIVE, WITHDRAWN, Redemption
from doypal.models.reward import Reward
from doypal.services.points_service import get_point_summary

logger = logging.getLogger(__name__)

# pg_advisory_xact_lock key guarding the ledger in single-profile mode
GLOBAL_LEDGER_LOCK_KEY = 0x446F7950


def _begin_sqlite_write(db: Session) -> None:
    # pysqlite defers BEGIN until the first INSERT; the balance read must
    # already hold the database write lock
    dbapi_connection = db.connection().connection.dbapi_connection
    if not dbapi_connection.in_transaction:
        db.execute(text("BEGIN IMMEDIATE"))


def _lock_ledger(db: Session, profile_id) -> None:
    """Serialize balance check + debit for one ledger until the transaction ends."""
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        _begin_sqlite_write(db)

    if profile_id is not None:
        profile = (
            Profile.active(db)
            .filter(Profile.id == profile_id)
            .with_for_update()
            .first()
        )
        if not profile:
            db.rollback()
            raise HTTPException(status_code=404, detail="Profile not found")
        return

    if dialect == "postgresql":
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": GLOBAL_LEDGER_LOCK_KEY})


# ============================================================
# REDEEM
# ============================================================
def redeem_reward(db: Session, *, reward_id, profile_id=None, use_view: bool = False) -> dict:
    if not reward_id:
        raise HTTPException(status_code=400, detail="Missing required field: reward_id")

    reward = Reward.active(db).filter(Reward.id == reward_id).first()
    if not reward:
        raise HTTPException(status_code=404, detail="Reward not found or inactive")

    _lock_ledger(db, profile_id)

    summary = get_point_summary(db, profile_id, use_view=use_view)
    current = summary["available_points"]

    if current < reward.point_cost:
        db.rollback()
        logger.info(
            "redemption rejected, insufficient points",
            extra={"reward_id": str(reward.id), "required": reward.point_cost, "current": current},
        )
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Insufficient points",
                "required": reward.point_cost,
                "current": current,
                "needed": reward.point_cost - current,
            },
        )

    redemption = Redemption(
        reward_id=reward.id,
        profile_id=profile_id,
        points_spent=reward.point_cost,
        status=ACTIVE,
    )
    db.add(redemption)
    db.commit()
    db.refresh(redemption)

    logger.info(
        "reward redeemed",
        extra={"redemption_id": str(redemption.id), "reward_id": str(reward.id), "points": redemption.points_spent},
    )

    return {
        "redemption": redemption,
        "message": "Reward redeemed successfully!",
        "previous_balance": current,
        "new_balance": current - redemption.points_spent,
        "points_spent": redemption.points_spent,
    }


# ============================================================
# WITHDRAW
# ============================================================
def withdraw_redemption(db: Session, redemption_id) -> dict:
    redemption = db.query(Redemption).filter(Redemption.id == redemption_id).first()
    if not redemption:
        raise HTTPException(status_code=404, detail="Redemption not found")

    if redemption.status == WITHDRAWN:
        raise HTTPException(status_code=400, detail="Redemption already withdrawn")

    # conditional flip so concurrent withdrawals cannot both succeed
    updated = (
        db.query(Redemption)
        .filter(Redemption.id == redemption_id, Redemption.status == ACTIVE)
        .update({Redemption.status: WITHDRAWN, Redemption.withdrawn_at: utcnow()}, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        raise HTTPException(status_code=400, detail="Redemption already withdrawn")

    db.commit()
    db.refresh(redemption)

    logger.info(
        "redemption withdrawn",
        extra={"redemption_id": str(redemption.id), "points_refunded": redemption.points_spent},
    )

    return {
        "message": "Redemption withdrawn successfully",
        "points_refunded": redemption.points_spent,
        "reward_name": redemption.reward.name if redemption.reward else "Unknown Reward",
    }


def list_redemptions(db: Session, *, profile_id=None, include_withdrawn: bool = False):
    q = db.query(Redemption)
    if profile_id is not None:
        q = q.filter(Redemption.profile_id == profile_id)
    if not include_withdrawn:
        q = q.filter(Redemption.status == ACTIVE)
    return q.order_by(Redemption.redeemed_at.desc()).all()
