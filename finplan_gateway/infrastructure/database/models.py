"""SQLAlchemy ORM models for persisted strategy recommendations"""

import uuid
from sqlalchemy import Column, DateTime, Float, Integer, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class StrategyRecommendationRecord(Base):
    """Recommendation produced by the strategy engine, with lifecycle state"""

    __tablename__ = "strategy_recommendation"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    dedup_key = Column(Text, nullable=False, index=True)
    category = Column(Text, nullable=False)
    finding_type = Column(Text, nullable=False)
    severity = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    summary = Column(Text, nullable=False)
    detail = Column(Text, nullable=False)
    sbs_score = Column(Float, nullable=False)
    confidence = Column(Float, nullable=False)
    benefit = Column(Float, nullable=False, default=0.0)
    rank = Column(Integer, nullable=False, default=0)
    impact = Column(JSON, nullable=False)
    affected_entities = Column(JSON, nullable=False)
    action_steps = Column(JSON, nullable=False)
    evidence = Column(JSON, nullable=True)
    status = Column(Text, nullable=False, default="PENDING", index=True)
    user_notes = Column(Text, nullable=True)
    dismiss_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    dismissed_at = Column(DateTime, nullable=True)
