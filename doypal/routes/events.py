from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from doypal.ai.capabilities import EmbeddingGenerator, Translator
from doypal.config import Settings, get_settings
from doypal.db import get_db
from doypal.deps.capabilities import get_embedder, get_translator
from doypal.deps.profile import get_profile_scope
from doypal.schemas.event import EventCreate, EventOut, EventUpdate
from doypal.services import event_service


router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=list[EventOut])
def list_events(
    profile_id: UUID | None = Depends(get_profile_scope),
    db: Session = Depends(get_db),
):
    return event_service.list_events(db, profile_id=profile_id)


@router.post("", response_model=EventOut)
def create_event(
    payload: EventCreate,
    settings: Settings = Depends(get_settings),
    translator: Translator = Depends(get_translator),
    embedder: EmbeddingGenerator = Depends(get_embedder),
    db: Session = Depends(get_db),
):
    return event_service.create_event(
        db,
        payload,
        translator=translator,
        embedder=embedder,
        tz_name=settings.timezone,
    )


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: UUID, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
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


@router.delete("/{event_id}")
def delete_event(event_id: UUID, db: Session = Depends(get_db)):
    event_service.archive_event(db, event_id)
    return {"message": "Event deleted successfully"}
