import uuid

from sqlalchemy import Column, ForeignKey, Integer, String, TIMESTAMP
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from doypal.db import Base, utcnow

ACTIVE = "active"
WITHDRAWN = "withdrawn"


class Redemption(Base):
    __tablename__ = "redemptions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    reward_id = Column(UUID(as_uuid=True), ForeignKey("rewards.id"), nullable=False, index=True)
    profile_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=True, index=True)

    # snapshot of reward.point_cost at redemption time, never updated
    points_spent = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default=ACTIVE)
    # active | withdrawn

    redeemed_at = Column(TIMESTAMP, nullable=False, default=utcnow)
    withdrawn_at = Column(TIMESTAMP, nullable=True)

    reward = relationship("Reward", lazy="joined")
