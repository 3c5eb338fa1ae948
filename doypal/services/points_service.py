from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from doypal.db import utcnow
from doypal.models.event import Event
from doypal.models.point_summary import point_summaries
from doypal.models.redemption import ACTIVE, Redemption

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def as_utc_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc_naive(dt: datetime) -> datetime:
    return as_utc_aware(dt).replace(tzinfo=None)


def local_day_fields(timestamp: datetime, tz_name: str = "UTC") -> tuple[str, int]:
    """(day_of_week, day_of_month) of a stored UTC timestamp in the given zone."""
    local = as_utc_aware(timestamp).astimezone(ZoneInfo(tz_name))
    # weekday(): Monday=0, names start on Sunday
    return WEEKDAY_NAMES[(local.weekday() + 1) % 7], local.day


def period_starts(now: datetime, tz_name: str = "UTC") -> tuple[datetime, datetime]:
    """Week (last Sunday 00:00) and month (1st 00:00) starts, as naive UTC."""
    local_now = as_utc_aware(now).astimezone(ZoneInfo(tz_name))
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)

    week_start = midnight - timedelta(days=(local_now.weekday() + 1) % 7)
    month_start = midnight.replace(day=1)

    return to_utc_naive(week_start), to_utc_naive(month_start)


def _scoped(q, column, profile_id):
    if profile_id is not None:
        q = q.filter(column == profile_id)
    return q


def get_spent_points(db: Session, profile_id=None) -> int:
    q = db.query(func.coalesce(func.sum(Redemption.points_spent), 0)).filter(Redemption.status == ACTIVE)
    spent = _scoped(q, Redemption.profile_id, profile_id).scalar()
    return int(spent or 0)


def _earned_from_view(db: Session, profile_id):
    stmt = select(
        func.sum(point_summaries.c.total_points),
        func.sum(point_summaries.c.weekly_points),
        func.sum(point_summaries.c.monthly_points),
    )
    if profile_id is not None:
        stmt = stmt.where(point_summaries.c.profile_id == profile_id)

    row = db.execute(stmt).first()
    if row is None or row[0] is None:
        return None
    return int(row[0]), int(row[1] or 0), int(row[2] or 0)


def _earned_from_events(db: Session, profile_id, now: datetime, tz_name: str):
    week_start, month_start = period_starts(now, tz_name)

    rows = _scoped(
        Event.active(db).with_entities(Event.points, Event.timestamp),
        Event.profile_id,
        profile_id,
    ).all()

    total = weekly = monthly = 0
    for points, timestamp in rows:
        total += points
        if timestamp >= week_start:
            weekly += points
        if timestamp >= month_start:
            monthly += points
    return total, weekly, monthly


def get_point_summary(
    db: Session,
    profile_id=None,
    *,
    now: datetime | None = None,
    tz_name: str = "UTC",
    use_view: bool = False,
) -> dict:
    earned = None
    if use_view:
        earned = _earned_from_view(db, profile_id)
    if earned is None:
        # view disabled, stale or without a row for this profile
        earned = _earned_from_events(db, profile_id, now or utcnow(), tz_name)

    total, weekly, monthly = earned
    spent = get_spent_points(db, profile_id)

    return {
        "profile_id": profile_id,
        "total_points": total,
        "weekly_points": weekly,
        "monthly_points": monthly,
        "spent_points": spent,
        "available_points": total - spent,
    }


def get_admin_points(
    db: Session,
    *,
    now: datetime | None = None,
    tz_name: str = "UTC",
    use_view: bool = False,
) -> dict:
    profile_ids = [
        row[0]
        for row in Event.active(db).with_entities(Event.profile_id).distinct().all()
        if row[0] is not None
    ]
    # global row first, then one row per profile with activity
    summaries = [
        get_point_summary(db, profile_id, now=now, tz_name=tz_name, use_view=use_view)
        for profile_id in [None, *sorted(profile_ids, key=str)]
    ]

    day_rows = (
        Event.active(db)
        .with_entities(Event.day_of_week, func.sum(Event.points))
        .filter(Event.day_of_week.isnot(None))
        .group_by(Event.day_of_week)
        .all()
    )
    points_by_day = {day: int(total or 0) for day, total in day_rows}

    return {"pointSummaries": summaries, "pointsByDay": points_by_day}
