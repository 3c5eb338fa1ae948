from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from doypal.db import get_db, utcnow
from doypal.models.template import Template
from doypal.schemas.template import TemplateCreate, TemplateOut, TemplateUpdate
from doypal.services.template_service import validate_template_fields


router = APIRouter(prefix="/api/templates", tags=["templates"])


def _serialize(template: Template) -> dict:
    return TemplateOut.model_validate(template).model_dump(mode="json")


@router.get("")
def list_templates(db: Session = Depends(get_db)):
    templates = Template.active(db).order_by(Template.frequency.desc(), Template.name.asc()).all()
    return {"templates": [_serialize(t) for t in templates]}


@router.post("")
def create_template(payload: TemplateCreate, db: Session = Depends(get_db)):
    if not payload.name or not payload.description or payload.default_points is None:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: name, description, default_points",
        )
    validate_template_fields(payload.model_dump(include={"name", "description", "default_points"}))

    template = Template(
        name=payload.name.strip(),
        description=payload.description.strip(),
        default_points=payload.default_points,
        frequency=payload.frequency or 0,
        ai_confidence=payload.ai_confidence,
        last_seen=utcnow(),
        is_active=True,
    )
    db.add(template)
    db.commit()
    db.refresh(template)
    return {"template": _serialize(template), "message": "Template created successfully"}


@router.get("/{template_id}")
def get_template(template_id: UUID, db: Session = Depends(get_db)):
    template = db.query(Template).filter(Template.id == template_id).first()
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return {"template": _serialize(template)}


@router.patch("/{template_id}")
def update_template(template_id: UUID, payload: TemplateUpdate, db: Session = Depends(get_db)):
    template = db.query(Template).filter(Template.id == template_id).first()
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")

    data = payload.model_dump(exclude_unset=True)
    validate_template_fields(data)
    if "frequency" in data and (data["frequency"] is None or data["frequency"] < 0):
        raise HTTPException(status_code=400, detail="Frequency must be zero or greater")
    if "is_active" in data and data["is_active"] is None:
        raise HTTPException(status_code=400, detail="is_active cannot be null")

    for k, v in data.items():
        setattr(template, k, v.strip() if k in ("name", "description") else v)

    db.commit()
    db.refresh(template)
    return {"template": _serialize(template), "message": "Template updated successfully"}


@router.delete("/{template_id}")
def delete_template(template_id: UUID, db: Session = Depends(get_db)):
    template = db.query(Template).filter(Template.id == template_id).first()
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")

    template.is_active = False
    db.commit()
    return {"message": "Template deleted successfully"}
