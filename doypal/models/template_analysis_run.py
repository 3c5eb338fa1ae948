import uuid

from sqlalchemy import Column, Integer, JSON, String, TIMESTAMP, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from doypal.db import Base


class TemplateAnalysisRun(Base):
    __tablename__ = "template_analysis_runs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    batch_id = Column(String(100), nullable=False, index=True)

    analyzed_events = Column(Integer, nullable=False, default=0)
    templates_generated = Column(Integer, nullable=False, default=0)

    # raw prompt / completion kept for audit
    model_input = Column(JSON, nullable=True)
    model_output = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP, server_default=func.now())
