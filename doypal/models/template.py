import uuid

from sqlalchemy import Column, Float, Integer, String, TIMESTAMP
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from doypal.db import Base, SoftDeleteMixin


class Template(SoftDeleteMixin, Base):
    __tablename__ = "templates"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=False)

    default_points = Column(Integer, nullable=False)

    # number of events linked to this template
    frequency = Column(Integer, nullable=False, default=0)
    last_seen = Column(TIMESTAMP, nullable=True)

    # NULL = created manually
    ai_confidence = Column(Float, nullable=True)
    generation_batch = Column(String(100), nullable=True, index=True)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
