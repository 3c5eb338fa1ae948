from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from doypal.ai.capabilities import EmbeddingGenerator, TemplateGenerator, Translator
from doypal.config import Settings, get_settings
from doypal.db import get_db
from doypal.deps.capabilities import get_embedder, get_template_generator, get_translator
from doypal.schemas.event import EventOut, EventUpdate
from doypal.schemas.points import AdminPointsOut
from doypal.schemas.similarity import EventEmbeddingUpdate, SimilarEventsRequest
from doypal.schemas.template import TemplateOut
from doypal.services import embedding_service, event_service
from doypal.services.analysis_service import analyze_templates
from doypal.services.points_service import get_admin_points


router = APIRouter(prefix="/api/admin", tags=["admin"])


# ─── events ───────────────────────────────────────────────────────
@router.get("/events", response_model=list[EventOut])
def list_all_events(db: Session = Depends(get_db)):
    return event_service.list_events(db, include_inactive=True)


@router.patch("/events/{event_id}", response_model=EventOut)
def admin_update_event(
    event_id: UUID,
    payload: EventUpdate,
    settings: Settings = Depends(get_settings),
    translator: Translator = Depends(get_translator),
    embedder: EmbeddingGenerator = Depends(get_embedder),
    db: Session = Depends(get_db),
):
    return event_service.update_event(
        db,
        event_id,
        payload,
        translator=translator,
        embedder=embedder,
        tz_name=settings.timezone,
    )


@router.delete("/events/{event_id}")
def admin_archive_event(event_id: UUID, db: Session = Depends(get_db)):
    event = event_service.archive_event(db, event_id)
    return {
        "message": "Event archived",
        "event": EventOut.model_validate(event).model_dump(mode="json"),
    }


@router.post("/events/similar")
def similar_events(
    payload: SimilarEventsRequest,
    translator: Translator = Depends(get_translator),
    embedder: EmbeddingGenerator = Depends(get_embedder),
    db: Session = Depends(get_db),
):
    if not payload.text or not payload.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")

    return embedding_service.find_similar_events(
        db,
        payload.text.strip(),
        translator=translator,
        embedder=embedder,
        threshold=payload.threshold,
        limit=payload.limit,
    )


@router.get("/events/categories")
def event_categories(threshold: float = 0.8):
    return {
        "categories": [],
        "threshold": threshold,
        "message": "AI event categorization feature is disabled",
    }


@router.post("/events/embedding")
def update_event_embedding(payload: EventEmbeddingUpdate, db: Session = Depends(get_db)):
    if not payload.eventId or not payload.embedding:
        raise HTTPException(status_code=400, detail="Event ID and embedding are required")

    event = embedding_service.update_event_embedding(db, payload.eventId, payload.embedding)
    return {
        "message": "Event embedding updated",
        "event": EventOut.model_validate(event).model_dump(mode="json"),
    }


@router.post("/events/update-all-embeddings")
def update_all_embeddings(
    translator: Translator = Depends(get_translator),
    embedder: EmbeddingGenerator = Depends(get_embedder),
    db: Session = Depends(get_db),
):
    return embedding_service.update_all_embeddings(db, translator=translator, embedder=embedder)


# ─── points ───────────────────────────────────────────────────────
@router.get("/points", response_model=AdminPointsOut)
def admin_points(settings: Settings = Depends(get_settings), db: Session = Depends(get_db)):
    return get_admin_points(db, tz_name=settings.timezone, use_view=settings.use_points_view)


# ─── templates ────────────────────────────────────────────────────
@router.post("/analyze-templates")
def run_template_analysis(
    generator: TemplateGenerator = Depends(get_template_generator),
    db: Session = Depends(get_db),
):
    result = analyze_templates(db, generator)
    result["templates"] = [
        TemplateOut.model_validate(t).model_dump(mode="json") for t in result["templates"]
    ]
    return result
