from datetime import datetime

from fastapi import HTTPException
from sqlalchemy.orm import Session

from doypal.db import utcnow
from doypal.models.template import Template

MIN_DEFAULT_POINTS = 1
MAX_DEFAULT_POINTS = 100


def get_active_template(db: Session, template_id) -> Template:
    template = Template.active(db).filter(Template.id == template_id).first()
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


def record_template_use(db: Session, template_id, now: datetime | None = None) -> bool:
    """Bump frequency and last_seen in a single UPDATE; False if no such template."""
    updated = (
        db.query(Template)
        .filter(Template.id == template_id)
        .update(
            {
                Template.frequency: Template.frequency + 1,
                Template.last_seen: now or utcnow(),
            },
            synchronize_session=False,
        )
    )
    return bool(updated)


def validate_template_fields(data: dict) -> None:
    if "name" in data and (data["name"] is None or not data["name"].strip()):
        raise HTTPException(status_code=400, detail="Template name cannot be empty")
    if "description" in data and (data["description"] is None or not data["description"].strip()):
        raise HTTPException(status_code=400, detail="Template description cannot be empty")
    if "default_points" in data:
        points = data["default_points"]
        if points is None or points < MIN_DEFAULT_POINTS or points > MAX_DEFAULT_POINTS:
            raise HTTPException(
                status_code=400,
                detail=f"Default points must be between {MIN_DEFAULT_POINTS} and {MAX_DEFAULT_POINTS}",
            )
