"""Strategy generation pipeline and recommendation lifecycle"""

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Callable, List, Protocol, Sequence, Set, Tuple

from finplan_gateway.domain.alternatives import generate_alternatives
from finplan_gateway.domain.analyzers.base import Analyzer
from finplan_gateway.domain.analyzers.registry import DEFAULT_ANALYZERS
from finplan_gateway.domain.data_quality import assess_data_quality
from finplan_gateway.domain.exceptions import InvalidTransitionError, RecommendationNotFoundError
from finplan_gateway.domain.models import (
    Alternative,
    FinancialSnapshot,
    RecommendationStatus,
    StrategyFinding,
    StrategyGenerationResult,
    StrategyRecommendation,
)
from finplan_gateway.domain.scoring import dedup_key, deduplicate, rank_findings
from finplan_gateway.utils.date_utils import utcnow

# Minimum confidence kept when snapshot data quality is poor
LIMITED_MODE_MIN_CONFIDENCE = 0.8

SnapshotProvider = Callable[[str], FinancialSnapshot]


class RecommendationStore(Protocol):
    """Persistence port for recommendations; implemented by the infrastructure layer"""

    def get(self, user_id: str, recommendation_id: str) -> StrategyRecommendation | None:
        ...

    def update(self, recommendation: StrategyRecommendation) -> StrategyRecommendation:
        ...

    def save_all(self, recommendations: List[StrategyRecommendation]) -> List[StrategyRecommendation]:
        ...

    def list_active(self, user_id: str) -> List[StrategyRecommendation]:
        ...

    def active_keys(self, user_id: str) -> Set[str]:
        ...

    def expire_stale(self, user_id: str, now: datetime) -> int:
        ...

    def expire_pending(self, user_id: str) -> int:
        ...


def _run_analyzer(
    analyzer: Analyzer, snapshot: FinancialSnapshot
) -> Tuple[List[StrategyFinding], Exception | None]:
    """Run one analyzer, capturing its failure instead of propagating it"""
    try:
        return list(analyzer.analyze(snapshot)), None
    except Exception as e:
        logging.warning(
            f"Analyzer {analyzer.name} failed: {e}",
            extra={"analyzer": analyzer.name, "user_id": snapshot.user_id},
        )
        return [], e


def rank_recommendations(recommendations: List[StrategyRecommendation]) -> List[StrategyRecommendation]:
    """Score desc, confidence desc, then creation order"""
    return sorted(
        recommendations,
        key=lambda r: (-r.finding.score, -r.finding.confidence, r.created_at, r.rank),
    )


def generate_strategies(
    user_id: str,
    snapshot_provider: SnapshotProvider,
    store: RecommendationStore,
    force_refresh: bool = False,
    analyzers: Sequence[Analyzer] = DEFAULT_ANALYZERS,
    now: datetime | None = None,
    ttl_days: int = 30,
    max_workers: int = 8,
) -> StrategyGenerationResult:
    """
    Generate, deduplicate, rank and persist strategy recommendations.

    Flow:
    1. Load the user's snapshot and assess its data quality
    2. Run all analyzers concurrently; a failing analyzer is logged and skipped
    3. Drop low-confidence findings in limited mode, dedup and rank
    4. Expire stale PENDING rows
    5. Persist findings whose key has no active PENDING row
       (force_refresh expires existing PENDING rows first)
    """
    start_time = time.time()
    now = now or utcnow()

    snapshot = snapshot_provider(user_id)
    quality = assess_data_quality(snapshot)

    # Fan out analyzers and join before ranking
    workers = max(1, min(max_workers, len(analyzers)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(lambda a: _run_analyzer(a, snapshot), analyzers))

    findings: List[StrategyFinding] = []
    failed: List[str] = []
    for analyzer, (found, error) in zip(analyzers, outcomes):
        if error is not None:
            failed.append(analyzer.name)
        findings.extend(found)

    findings_before = len(findings)
    if quality.limited_mode:
        findings = [f for f in findings if f.confidence >= LIMITED_MODE_MIN_CONFIDENCE]

    ranked = rank_findings(deduplicate(findings))

    store.expire_stale(user_id, now)
    if force_refresh:
        store.expire_pending(user_id)
        existing: Set[str] = set()
    else:
        existing = store.active_keys(user_id)

    expires_at = now + timedelta(days=ttl_days)
    new_recommendations = [
        StrategyRecommendation(
            id=str(uuid.uuid4()),
            user_id=user_id,
            dedup_key=dedup_key(finding),
            finding=finding,
            status=RecommendationStatus.PENDING,
            created_at=now,
            expires_at=expires_at,
            rank=position,
        )
        for position, finding in enumerate(ranked)
        if dedup_key(finding) not in existing
    ]
    saved = store.save_all(new_recommendations)

    return StrategyGenerationResult(
        recommendations=rank_recommendations(store.list_active(user_id)),
        analyzers_run=[a.name for a in analyzers],
        analyzers_failed=failed,
        findings_before_dedup=findings_before,
        findings_after_dedup=len(ranked),
        created=len(new_recommendations),
        skipped=len(ranked) - len(new_recommendations),
        execution_time_ms=(time.time() - start_time) * 1000,
        data_quality=quality,
        created_ids=[rec.id for rec in saved],
    )


def list_recommendations(store: RecommendationStore, user_id: str) -> List[StrategyRecommendation]:
    return rank_recommendations(store.list_active(user_id))


def get_recommendation(store: RecommendationStore, user_id: str, recommendation_id: str) -> StrategyRecommendation:
    """
    Fetch a recommendation owned by user_id.

    Raises:
        RecommendationNotFoundError: unknown id or owned by another user
    """
    recommendation = store.get(user_id, recommendation_id)
    if recommendation is None or recommendation.user_id != user_id:
        raise RecommendationNotFoundError(f"Recommendation {recommendation_id} not found")
    return recommendation


def _require_pending(
    recommendation: StrategyRecommendation, target: RecommendationStatus, now: datetime
) -> None:
    if recommendation.status != RecommendationStatus.PENDING:
        raise InvalidTransitionError(
            f"Cannot move recommendation from {recommendation.status.value} to {target.value}"
        )
    if recommendation.expires_at <= now:
        raise InvalidTransitionError(f"Recommendation expired at {recommendation.expires_at.isoformat()}")


def accept_recommendation(
    store: RecommendationStore,
    user_id: str,
    recommendation_id: str,
    notes: str | None = None,
    now: datetime | None = None,
) -> StrategyRecommendation:
    now = now or utcnow()
    recommendation = get_recommendation(store, user_id, recommendation_id)
    _require_pending(recommendation, RecommendationStatus.ACCEPTED, now)

    recommendation.status = RecommendationStatus.ACCEPTED
    recommendation.accepted_at = now
    recommendation.user_notes = notes
    return store.update(recommendation)


def dismiss_recommendation(
    store: RecommendationStore,
    user_id: str,
    recommendation_id: str,
    reason: str | None = None,
    now: datetime | None = None,
) -> StrategyRecommendation:
    now = now or utcnow()
    recommendation = get_recommendation(store, user_id, recommendation_id)
    _require_pending(recommendation, RecommendationStatus.DISMISSED, now)

    recommendation.status = RecommendationStatus.DISMISSED
    recommendation.dismissed_at = now
    recommendation.dismiss_reason = reason
    return store.update(recommendation)


def update_recommendation_status(
    store: RecommendationStore,
    user_id: str,
    recommendation_id: str,
    status: RecommendationStatus | str,
    notes: str | None = None,
    now: datetime | None = None,
) -> StrategyRecommendation:
    """
    Apply a user-driven status change.

    Only ACCEPTED and DISMISSED can be requested; expiry is time-driven.
    """
    try:
        target = RecommendationStatus(status)
    except ValueError as e:
        raise InvalidTransitionError(f"Unknown status: {status}") from e

    if target == RecommendationStatus.ACCEPTED:
        return accept_recommendation(store, user_id, recommendation_id, notes, now)
    if target == RecommendationStatus.DISMISSED:
        return dismiss_recommendation(store, user_id, recommendation_id, notes, now)
    raise InvalidTransitionError(f"Status must be ACCEPTED or DISMISSED, got {target.value}")


def expire_recommendations(store: RecommendationStore, user_id: str, now: datetime | None = None) -> int:
    """Mark PENDING recommendations past their expiry as EXPIRED"""
    return store.expire_stale(user_id, now or utcnow())


def get_alternatives(store: RecommendationStore, user_id: str, recommendation_id: str) -> List[Alternative]:
    return generate_alternatives(get_recommendation(store, user_id, recommendation_id))
