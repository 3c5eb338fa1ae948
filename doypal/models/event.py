import uuid

from pgvector.sqlalchemy import Vector
from sqlalchemy import Column, ForeignKey, Integer, JSON, String, TIMESTAMP
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from doypal.db import Base, SoftDeleteMixin, utcnow

# text-embedding-3-large
EMBEDDING_DIMENSIONS = 3072


class Event(SoftDeleteMixin, Base):
    __tablename__ = "events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    profile_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=True, index=True)
    template_id = Column(UUID(as_uuid=True), ForeignKey("templates.id"), nullable=True, index=True)

    name = Column(String(200), nullable=True)
    description = Column(String(1000), nullable=False)
    # translated / canonical form used for embeddings
    normalized_description = Column(String(1000), nullable=True)
    # pgvector on Postgres, plain JSON list elsewhere
    description_embedding = Column(JSON().with_variant(Vector(EMBEDDING_DIMENSIONS), "postgresql"), nullable=True)

    points = Column(Integer, nullable=False)

    timestamp = Column(TIMESTAMP, nullable=False, default=utcnow, index=True)
    day_of_week = Column(String(10), nullable=False)  # Sunday .. Saturday
    day_of_month = Column(Integer, nullable=False)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
