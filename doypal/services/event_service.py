import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from doypal.ai.capabilities import EmbeddingGenerator, Translator
from doypal.db import utcnow
from doypal.models.event import Event
from doypal.models.profile import Profile
from doypal.services.embedding_service import enrich_event
from doypal.services.points_service import to_utc_naive, local_day_fields
from doypal.services.template_service import get_active_template, record_template_use

logger = logging.getLogger(__name__)


def _ensure_profile(db: Session, profile_id) -> None:
    if profile_id is None:
        return
    if not Profile.active(db).filter(Profile.id == profile_id).first():
        raise HTTPException(status_code=404, detail="Profile not found")


def get_event(db: Session, event_id) -> Event:
    # archived rows stay readable for audit
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def list_events(db: Session, *, profile_id=None, include_inactive: bool = False):
    q = db.query(Event) if include_inactive else Event.active(db)
    if profile_id is not None:
        q = q.filter(Event.profile_id == profile_id)
    return q.order_by(Event.timestamp.desc()).all()


def create_event(
    db: Session,
    payload,
    *,
    translator: Translator,
    embedder: EmbeddingGenerator,
    tz_name: str = "UTC",
) -> Event:
    if not payload.description.strip():
        raise HTTPException(status_code=400, detail="description is required")

    _ensure_profile(db, payload.profile_id)
    if payload.template_id is not None:
        get_active_template(db, payload.template_id)

    timestamp = to_utc_naive(payload.timestamp) if payload.timestamp else utcnow()
    day_of_week, day_of_month = local_day_fields(timestamp, tz_name)

    event = Event(
        profile_id=payload.profile_id,
        template_id=payload.template_id,
        name=payload.name,
        description=payload.description.strip(),
        points=payload.points,
        timestamp=timestamp,
        day_of_week=payload.day_of_week or day_of_week,
        day_of_month=payload.day_of_month or day_of_month,
        is_active=True,
    )
    enrich_event(event, translator, embedder)

    db.add(event)
    if event.template_id is not None:
        record_template_use(db, event.template_id, now=timestamp)
    db.commit()
    db.refresh(event)

    logger.info("event created", extra={"event_id": str(event.id), "points": event.points})
    return event


def update_event(
    db: Session,
    event_id,
    payload,
    *,
    translator: Translator,
    embedder: EmbeddingGenerator,
    tz_name: str = "UTC",
) -> Event:
    event = get_event(db, event_id)
    data = payload.model_dump(exclude_unset=True)

    for key in ("description", "points", "timestamp", "day_of_week", "day_of_month", "is_active"):
        if key in data and data[key] is None:
            raise HTTPException(status_code=400, detail=f"{key} cannot be null")

    if "profile_id" in data:
        _ensure_profile(db, data["profile_id"])

    new_template_id = data.get("template_id")
    link_template = "template_id" in data and new_template_id is not None and new_template_id != event.template_id
    if link_template:
        get_active_template(db, new_template_id)

    if "timestamp" in data:
        data["timestamp"] = to_utc_naive(data["timestamp"])
        day_of_week, day_of_month = local_day_fields(data["timestamp"], tz_name)
        data.setdefault("day_of_week", day_of_week)
        data.setdefault("day_of_month", day_of_month)

    description_changed = "description" in data and data["description"] != event.description

    for k, v in data.items():
        setattr(event, k, v.strip() if k == "description" else v)

    if description_changed:
        enrich_event(event, translator, embedder)
    if link_template:
        record_template_use(db, new_template_id)

    db.commit()
    db.refresh(event)
    return event


def archive_event(db: Session, event_id) -> Event:
    event = get_event(db, event_id)
    event.is_active = False
    db.commit()
    db.refresh(event)

    logger.info("event archived", extra={"event_id": str(event.id)})
    return event
