import logging
import time

from fastapi import HTTPException
from pgvector.sqlalchemy import Vector
from sqlalchemy import bindparam, text
from sqlalchemy.orm import Session

from doypal.ai.capabilities import EmbeddingGenerator, Translator
from doypal.models.event import EMBEDDING_DIMENSIONS, Event

logger = logging.getLogger(__name__)

SIMILAR_EVENTS_SQL = text(
    "SELECT * FROM find_similar_events("
    "CAST(:search_embedding AS vector), :similarity_threshold, :max_results)"
).bindparams(bindparam("search_embedding", type_=Vector(EMBEDDING_DIMENSIONS)))


def enrich_event(event: Event, translator: Translator, embedder: EmbeddingGenerator) -> None:
    """Fill normalized_description / description_embedding when AI is enabled.

    Failures are logged and leave the event as it is; enrichment never blocks
    an event write.
    """
    if not translator.enabled and not embedder.enabled:
        return

    try:
        normalized = translator.translate(event.description)
        event.normalized_description = normalized
        if embedder.enabled:
            event.description_embedding = embedder.embed(normalized)
    except Exception:
        logger.warning("event enrichment failed", extra={"event_id": str(event.id)}, exc_info=True)


def _search_similar_events(db: Session, embedding: list[float], threshold: float, limit: int) -> list[dict]:
    # nearest-neighbour search runs inside the database
    rows = db.execute(
        SIMILAR_EVENTS_SQL,
        {
            "search_embedding": list(embedding),
            "similarity_threshold": threshold,
            "max_results": limit,
        },
    ).mappings().all()
    return [dict(row) for row in rows]


def find_similar_events(
    db: Session,
    text_query: str,
    *,
    translator: Translator,
    embedder: EmbeddingGenerator,
    threshold: float = 0.6,
    limit: int = 10,
) -> dict:
    if not embedder.enabled:
        return {
            "query": text_query,
            "similarEvents": [],
            "message": "Similarity search feature is disabled",
        }

    try:
        embedding = embedder.embed(translator.translate(text_query))
    except Exception:
        logger.exception("embedding generation failed", extra={"query": text_query})
        raise HTTPException(status_code=500, detail="Failed to generate embedding")

    similar = _search_similar_events(db, embedding, threshold, limit)
    return {"query": text_query, "similarEvents": similar}


def update_event_embedding(db: Session, event_id, embedding: list[float]) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    event.description_embedding = list(embedding)
    db.commit()
    db.refresh(event)
    return event


def update_all_embeddings(
    db: Session,
    *,
    translator: Translator,
    embedder: EmbeddingGenerator,
    chunk_size: int = 20,
    pause_seconds: float = 1.0,
    sleep=time.sleep,
) -> dict:
    if not embedder.enabled:
        return {"message": "Bulk embedding update feature is disabled", "updated": 0, "total": 0}

    events = Event.active(db).order_by(Event.timestamp.asc()).all()
    total = len(events)
    updated = 0

    for start in range(0, total, chunk_size):
        if start:
            # stay under the provider's rate limit
            sleep(pause_seconds)

        for event in events[start:start + chunk_size]:
            try:
                normalized = translator.translate(event.description)
                event.normalized_description = normalized
                event.description_embedding = embedder.embed(normalized)
                updated += 1
            except Exception:
                logger.warning("embedding refresh failed", extra={"event_id": str(event.id)}, exc_info=True)
        db.commit()

    logger.info("embedding refresh finished", extra={"updated": updated, "total": total})
    return {"message": "Embeddings updated", "updated": updated, "total": total}
