from typing import List, Optional

from uuid import UUID

from pydantic import BaseModel, Field


class SimilarEventsRequest(BaseModel):
    text: Optional[str] = None
    threshold: float = Field(default=0.6, ge=0, le=1)
    limit: int = Field(default=10, ge=1, le=100)


class EmbeddingRequest(BaseModel):
    text: Optional[str] = None


class EventEmbeddingUpdate(BaseModel):
    eventId: Optional[UUID] = None
    embedding: Optional[List[float]] = None
