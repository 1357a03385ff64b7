"""Data access layer for strategy recommendations"""

import uuid
from dataclasses import asdict
from datetime import datetime
from typing import List, Optional, Set
from sqlalchemy.orm import Session
from finplan_gateway.infrastructure.database.models import StrategyRecommendationRecord
from finplan_gateway.domain.models import (
    AnalyzerCategory,
    EntityRef,
    ImpactScore,
    RecommendationStatus,
    Severity,
    StrategyFinding,
    StrategyRecommendation,
)

PENDING = RecommendationStatus.PENDING.value
EXPIRED = RecommendationStatus.EXPIRED.value


def _to_domain(record: StrategyRecommendationRecord) -> StrategyRecommendation:
    finding = StrategyFinding(
        finding_type=record.finding_type,
        category=AnalyzerCategory(record.category),
        severity=Severity(record.severity),
        title=record.title,
        summary=record.summary,
        detail=record.detail,
        impact=ImpactScore(**record.impact),
        score=record.sbs_score,
        confidence=record.confidence,
        benefit=record.benefit,
        affected_entities=[EntityRef(**entity) for entity in record.affected_entities],
        action_steps=list(record.action_steps),
        evidence=record.evidence or {},
    )
    return StrategyRecommendation(
        id=str(record.id),
        user_id=record.user_id,
        dedup_key=record.dedup_key,
        finding=finding,
        status=RecommendationStatus(record.status),
        created_at=record.created_at,
        expires_at=record.expires_at,
        rank=record.rank,
        accepted_at=record.accepted_at,
        dismissed_at=record.dismissed_at,
        user_notes=record.user_notes,
        dismiss_reason=record.dismiss_reason,
    )


def _to_record(recommendation: StrategyRecommendation) -> StrategyRecommendationRecord:
    finding = recommendation.finding
    return StrategyRecommendationRecord(
        id=uuid.UUID(recommendation.id),
        user_id=recommendation.user_id,
        dedup_key=recommendation.dedup_key,
        category=finding.category.value,
        finding_type=finding.finding_type,
        severity=finding.severity.value,
        title=finding.title,
        summary=finding.summary,
        detail=finding.detail,
        sbs_score=finding.score,
        confidence=finding.confidence,
        benefit=finding.benefit,
        rank=recommendation.rank,
        impact=asdict(finding.impact),
        affected_entities=[asdict(entity) for entity in finding.affected_entities],
        action_steps=list(finding.action_steps),
        evidence=finding.evidence,
        status=recommendation.status.value,
        created_at=recommendation.created_at,
        expires_at=recommendation.expires_at,
    )


class RecommendationRepository:
    """Repository for strategy recommendations; satisfies the strategy engine's store port"""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, recommendation_id: str, user_id: str | None = None) -> Optional[StrategyRecommendationRecord]:
        try:
            record_id = uuid.UUID(str(recommendation_id))
        except ValueError:
            return None
        query = self.db.query(StrategyRecommendationRecord).filter(StrategyRecommendationRecord.id == record_id)
        if user_id is not None:
            query = query.filter(StrategyRecommendationRecord.user_id == user_id)
        return query.first()

    def _pending(self, user_id: str):
        return self.db.query(StrategyRecommendationRecord).filter(
            StrategyRecommendationRecord.user_id == user_id,
            StrategyRecommendationRecord.status == PENDING,
        )

    def get(self, user_id: str, recommendation_id: str) -> Optional[StrategyRecommendation]:
        """Fetch a recommendation scoped to its owner"""
        record = self._find(recommendation_id, user_id)
        return _to_domain(record) if record is not None else None

    def update(self, recommendation: StrategyRecommendation) -> StrategyRecommendation:
        """Persist lifecycle fields of an existing recommendation"""
        record = self._find(recommendation.id)
        record.status = recommendation.status.value
        record.accepted_at = recommendation.accepted_at
        record.dismissed_at = recommendation.dismissed_at
        record.user_notes = recommendation.user_notes
        record.dismiss_reason = recommendation.dismiss_reason
        self.db.flush()
        return _to_domain(record)

    def save_all(self, recommendations: List[StrategyRecommendation]) -> List[StrategyRecommendation]:
        """Insert new recommendations"""
        records = [_to_record(rec) for rec in recommendations]
        self.db.add_all(records)
        self.db.flush()  # Get IDs without committing
        return [_to_domain(record) for record in records]

    def list_active(self, user_id: str) -> List[StrategyRecommendation]:
        records = (
            self._pending(user_id)
            .order_by(StrategyRecommendationRecord.created_at, StrategyRecommendationRecord.rank)
            .all()
        )
        return [_to_domain(record) for record in records]

    def active_keys(self, user_id: str) -> Set[str]:
        return {record.dedup_key for record in self._pending(user_id).all()}

    def expire_stale(self, user_id: str, now: datetime) -> int:
        """Expire PENDING rows whose expiry has passed"""
        records = self._pending(user_id).filter(StrategyRecommendationRecord.expires_at <= now).all()
        for record in records:
            record.status = EXPIRED
        self.db.flush()
        return len(records)

    def expire_pending(self, user_id: str) -> int:
        """Expire every PENDING row for a forced regeneration"""
        records = self._pending(user_id).all()
        for record in records:
            record.status = EXPIRED
        self.db.flush()
        return len(records)
