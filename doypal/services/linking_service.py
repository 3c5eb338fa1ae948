import logging
import uuid

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from doypal.ai.capabilities import LinkSuggester
from doypal.db import utcnow
from doypal.models.event import Event
from doypal.models.template import Template
from doypal.services.template_service import get_active_template, record_template_use

logger = logging.getLogger(__name__)

UNLINKED_SAMPLE_SIZE = 50
SUGGESTION_MIN_CONFIDENCE = 0.6


def _parse_id(value, label: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid {label}")


def _link(db: Session, event_id, template_id) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    get_active_template(db, template_id)

    event.template_id = template_id
    db.flush()
    record_template_use(db, template_id, now=utcnow())
    return event


# ============================================================
# SINGLE LINK
# ============================================================
def link_event_to_template(db: Session, event_id, template_id) -> Event:
    if not event_id or not template_id:
        raise HTTPException(status_code=400, detail="Missing event_id or template_id")

    event = _link(db, _parse_id(event_id, "event_id"), _parse_id(template_id, "template_id"))
    db.commit()
    db.refresh(event)

    logger.info("event linked to template", extra={"event_id": str(event.id), "template_id": str(template_id)})
    return event


# ============================================================
# BATCH LINK (best effort, one savepoint per pair)
# ============================================================
def batch_link(db: Session, pairs) -> dict:
    results = []
    for pair in pairs:
        event_id = getattr(pair, "event_id", None)
        template_id = getattr(pair, "template_id", None)
        result = {"event_id": event_id, "template_id": template_id, "success": False}

        try:
            if not event_id or not template_id:
                raise HTTPException(status_code=400, detail="Missing event_id or template_id")
            parsed_event = _parse_id(event_id, "event_id")
            parsed_template = _parse_id(template_id, "template_id")
            with db.begin_nested():
                _link(db, parsed_event, parsed_template)
            result["success"] = True
        except HTTPException as exc:
            result["error"] = exc.detail
        except SQLAlchemyError:
            logger.warning("batch link item failed", extra={"event_id": event_id}, exc_info=True)
            result["error"] = "Database error"

        results.append(result)

    db.commit()

    successful = sum(1 for r in results if r["success"])
    failed = len(results) - successful

    logger.info("batch linking finished", extra={"successful": successful, "failed": failed})
    return {
        "success": True,
        "results": results,
        "summary": {"successful": successful, "failed": failed, "total": len(results)},
        "message": f"Batch linking completed: {successful} successful, {failed} failed",
    }


# ============================================================
# OVERVIEW / SUGGESTIONS
# ============================================================
def _unlinked_events(db: Session, limit: int = UNLINKED_SAMPLE_SIZE):
    return (
        Event.active(db)
        .filter(Event.template_id.is_(None))
        .order_by(Event.timestamp.desc())
        .limit(limit)
        .all()
    )


def _linkable_templates(db: Session):
    return (
        Template.active(db)
        .order_by(Template.ai_confidence.desc().nullslast(), Template.name.asc())
        .all()
    )


def get_link_overview(db: Session) -> dict:
    events = _unlinked_events(db)
    templates = _linkable_templates(db)
    return {
        "unlinked_events": events,
        "templates": templates,
        "summary": {"unlinked_count": len(events), "templates_count": len(templates)},
    }


def generate_link_suggestions(db: Session, suggester: LinkSuggester) -> dict:
    if not suggester.enabled:
        return {
            "success": False,
            "suggestions": [],
            "message": "AI template linking suggestions feature is disabled",
        }

    events = _unlinked_events(db)
    templates = _linkable_templates(db)
    if not events or not templates:
        return {"success": True, "suggestions": [], "message": "Nothing to link"}

    event_payload = [
        {"id": str(e.id), "name": e.name, "description": e.normalized_description or e.description, "points": e.points}
        for e in events
    ]
    template_payload = [
        {"id": str(t.id), "name": t.name, "description": t.description, "default_points": t.default_points}
        for t in templates
    ]

    try:
        raw = suggester.suggest(event_payload, template_payload)
    except Exception:
        logger.exception("link suggestion generation failed")
        raise HTTPException(status_code=500, detail="Failed to generate suggestions")

    event_ids = {p["id"] for p in event_payload}
    template_ids = {p["id"] for p in template_payload}
    suggestions = [
        {
            "event_id": s.event_id,
            "template_id": s.template_id,
            "confidence": s.confidence,
            "reason": s.reason,
        }
        for s in raw
        if s.confidence >= SUGGESTION_MIN_CONFIDENCE and s.event_id in event_ids and s.template_id in template_ids
    ]

    return {
        "success": True,
        "suggestions": suggestions,
        "message": f"Generated {len(suggestions)} suggestions",
    }
