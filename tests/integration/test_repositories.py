"""Integration tests for the recommendation repository against sqlite"""

import uuid
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from finplan_gateway.domain.models import (
    AnalyzerCategory,
    EntityRef,
    ImpactScore,
    RecommendationStatus,
    Severity,
    StrategyFinding,
    StrategyRecommendation,
)
from finplan_gateway.domain.strategy import RecommendationStore
from finplan_gateway.infrastructure.database.repositories import RecommendationRepository

NOW = datetime(2026, 6, 30, 9, 0)


def _recommendation(user_id: str, key: str, rank: int = 0, created_at: datetime = NOW) -> StrategyRecommendation:
    finding = StrategyFinding(
        finding_type="DEBT_REFINANCE",
        category=AnalyzerCategory.DEBT,
        severity=Severity.HIGH,
        title="Refinance home loan",
        summary="Your rate is above market",
        detail="Switching lenders would lower repayments",
        impact=ImpactScore(financial=60, risk=10, liquidity=5, tax=0, confidence=85),
        score=72.5,
        confidence=0.85,
        benefit=4200.0,
        affected_entities=[EntityRef("LOAN", key)],
        action_steps=["Compare lender rates", "Request a rate review"],
        evidence={"current_rate": 0.065, "market_rate": 0.059},
    )
    return StrategyRecommendation(
        id=str(uuid.uuid4()),
        user_id=user_id,
        dedup_key=f"DEBT:LOAN:{key}",
        finding=finding,
        status=RecommendationStatus.PENDING,
        created_at=created_at,
        expires_at=created_at + timedelta(days=30),
        rank=rank,
    )


def test_save_and_get_round_trip(db: Session):
    """Test saved recommendations come back with their finding intact"""
    repo = RecommendationRepository(db)
    rec = _recommendation("user_1", "loan_home")

    repo.save_all([rec])
    loaded = repo.get("user_1", rec.id)

    assert loaded is not None
    assert loaded.finding.category == AnalyzerCategory.DEBT
    assert loaded.finding.impact.financial == 60
    assert loaded.finding.affected_entities == [EntityRef("LOAN", "loan_home")]
    assert loaded.finding.evidence["market_rate"] == 0.059
    assert loaded.status == RecommendationStatus.PENDING
    assert loaded.expires_at == NOW + timedelta(days=30)


def test_get_scoped_to_owner(db: Session):
    """Test another user's id or a malformed id returns None"""
    repo = RecommendationRepository(db)
    rec = _recommendation("user_1", "loan_home")
    repo.save_all([rec])

    assert repo.get("user_2", rec.id) is None
    assert repo.get("user_1", "not-a-uuid") is None
    assert repo.get("user_1", str(uuid.uuid4())) is None


def test_list_active_orders_by_batch_rank(db: Session):
    """Test only pending rows are listed, in creation then rank order"""
    repo = RecommendationRepository(db)
    later = _recommendation("user_1", "loan_c", rank=0, created_at=NOW + timedelta(hours=1))
    second = _recommendation("user_1", "loan_b", rank=1)
    first = _recommendation("user_1", "loan_a", rank=0)
    repo.save_all([later, second, first])

    active = repo.list_active("user_1")

    assert [r.id for r in active] == [first.id, second.id, later.id]


def test_active_keys_ignore_other_statuses(db: Session):
    """Test accepted rows release their dedup key"""
    repo = RecommendationRepository(db)
    pending = _recommendation("user_1", "loan_a")
    accepted = _recommendation("user_1", "loan_b")
    repo.save_all([pending, accepted])

    accepted.status = RecommendationStatus.ACCEPTED
    accepted.accepted_at = NOW
    repo.update(accepted)

    assert repo.active_keys("user_1") == {"DEBT:LOAN:loan_a"}


def test_update_persists_lifecycle_fields(db: Session):
    """Test dismissal fields are written back"""
    repo = RecommendationRepository(db)
    rec = _recommendation("user_1", "loan_a")
    repo.save_all([rec])

    rec.status = RecommendationStatus.DISMISSED
    rec.dismissed_at = NOW + timedelta(days=1)
    rec.dismiss_reason = "Already refinanced"
    updated = repo.update(rec)
    db.commit()

    reloaded = repo.get("user_1", rec.id)
    assert updated.status == RecommendationStatus.DISMISSED
    assert reloaded.dismiss_reason == "Already refinanced"
    assert reloaded.dismissed_at == NOW + timedelta(days=1)


def test_expire_stale_only_past_expiry(db: Session):
    """Test rows are expired once their expiry has passed"""
    repo = RecommendationRepository(db)
    old = _recommendation("user_1", "loan_a", created_at=NOW - timedelta(days=31))
    fresh = _recommendation("user_1", "loan_b")
    repo.save_all([old, fresh])

    expired = repo.expire_stale("user_1", NOW)

    assert expired == 1
    assert repo.get("user_1", old.id).status == RecommendationStatus.EXPIRED
    assert [r.id for r in repo.list_active("user_1")] == [fresh.id]


def test_expire_pending_is_per_user(db: Session):
    """Test forced expiry leaves other users untouched"""
    repo = RecommendationRepository(db)
    repo.save_all([_recommendation("user_1", "loan_a"), _recommendation("user_1", "loan_b")])
    repo.save_all([_recommendation("user_2", "loan_a")])

    assert repo.expire_pending("user_1") == 2
    assert repo.list_active("user_1") == []
    assert len(repo.list_active("user_2")) == 1


def test_repository_surface_matches_store_protocol():
    """Test the repository exposes exactly the store operations the domain uses"""
    def public(cls) -> set[str]:
        return {name for name, value in vars(cls).items() if callable(value) and not name.startswith("_")}

    assert public(RecommendationRepository) == public(RecommendationStore)
