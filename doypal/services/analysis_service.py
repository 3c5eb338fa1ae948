import logging
import uuid

from fastapi import HTTPException
from sqlalchemy.orm import Session

from doypal.ai.capabilities import TemplateGenerator, TemplateProposal
from doypal.db import utcnow
from doypal.models.event import Event
from doypal.models.template import Template
from doypal.models.template_analysis_run import TemplateAnalysisRun
from doypal.services.template_service import MAX_DEFAULT_POINTS, MIN_DEFAULT_POINTS

logger = logging.getLogger(__name__)

ANALYSIS_SAMPLE_SIZE = 100
MAX_TEMPLATES = 15


def _new_batch_id() -> str:
    return f"batch-{utcnow().strftime('%Y%m%dT%H%M%S')}-{uuid.uuid4().hex[:8]}"


def _clean(proposals: list[TemplateProposal]) -> list[TemplateProposal]:
    cleaned = []
    seen = set()
    for p in proposals:
        name = (p.name or "").strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        p.name = name
        p.description = (p.description or "").strip() or name
        p.default_points = min(max(int(p.default_points), MIN_DEFAULT_POINTS), MAX_DEFAULT_POINTS)
        p.estimated_frequency = max(int(p.estimated_frequency or 0), 0)
        if p.confidence is not None:
            p.confidence = min(max(float(p.confidence), 0.0), 1.0)
        cleaned.append(p)
    return cleaned[:MAX_TEMPLATES]


def analyze_templates(db: Session, generator: TemplateGenerator, *, sample_size: int = ANALYSIS_SAMPLE_SIZE) -> dict:
    if not generator.enabled:
        return {
            "success": False,
            "batch_id": None,
            "analyzed_events": 0,
            "templates_generated": 0,
            "templates": [],
            "message": "AI template analysis feature is disabled",
        }

    events = Event.active(db).order_by(Event.timestamp.desc()).limit(sample_size).all()
    if not events:
        return {
            "success": False,
            "batch_id": None,
            "analyzed_events": 0,
            "templates_generated": 0,
            "templates": [],
            "message": "No events to analyze",
        }

    sample = [
        {"id": str(e.id), "description": e.normalized_description or e.description, "points": e.points}
        for e in events
    ]

    try:
        generation = generator.generate(sample)
    except Exception:
        logger.exception("template generation failed", extra={"events": len(sample)})
        raise HTTPException(status_code=500, detail="Failed to analyze templates")

    batch_id = _new_batch_id()
    proposals = _clean(generation.proposals)

    db.add(
        TemplateAnalysisRun(
            batch_id=batch_id,
            analyzed_events=len(sample),
            templates_generated=len(proposals),
            model_input=generation.model_input,
            model_output=generation.model_output,
        )
    )

    if not proposals:
        # keep the current generation rather than leaving the catalog empty
        db.commit()
        logger.warning("template analysis produced no templates", extra={"batch_id": batch_id})
        return {
            "success": False,
            "batch_id": batch_id,
            "analyzed_events": len(sample),
            "templates_generated": 0,
            "templates": [],
            "message": "No templates were generated",
        }

    Template.active(db).update({Template.is_active: False}, synchronize_session=False)

    now = utcnow()
    templates = [
        Template(
            name=p.name,
            description=p.description,
            default_points=p.default_points,
            frequency=p.estimated_frequency,
            ai_confidence=p.confidence,
            last_seen=now,
            generation_batch=batch_id,
            is_active=True,
        )
        for p in proposals
    ]
    db.add_all(templates)
    db.commit()
    for t in templates:
        db.refresh(t)

    logger.info(
        "template analysis finished",
        extra={"batch_id": batch_id, "analyzed_events": len(sample), "templates_generated": len(templates)},
    )
    return {
        "success": True,
        "batch_id": batch_id,
        "analyzed_events": len(sample),
        "templates_generated": len(templates),
        "templates": templates,
        "message": f"Generated {len(templates)} templates from {len(sample)} events",
    }
