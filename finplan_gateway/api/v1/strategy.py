"""Strategy recommendation endpoints: generation and lifecycle"""

import time
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from finplan_gateway.api.v1.schemas import (
    AlternativeSchema,
    AlternativesResponse,
    GenerationMetadata,
    RecommendationSchema,
    RecommendationUpdateRequest,
    StrategyGenerateRequest,
    StrategyGenerateResponse,
)
from finplan_gateway.api.dependencies import get_portfolio_client, get_request_id
from finplan_gateway.infrastructure.database.session import get_db
from finplan_gateway.infrastructure.database.repositories import RecommendationRepository
from finplan_gateway.infrastructure.clients.portfolio import PortfolioClient
from finplan_gateway.domain.strategy import (
    generate_strategies,
    get_alternatives,
    get_recommendation,
    list_recommendations,
    update_recommendation_status,
)
from finplan_gateway.domain.exceptions import (
    InvalidTransitionError,
    PortfolioAPIError,
    RecommendationNotFoundError,
)
from finplan_gateway.infrastructure.observability.metrics import (
    portfolio_fetch_failures_counter,
    record_strategy_generation,
    recommendation_transition_counter,
)
from finplan_gateway.infrastructure.observability.logging import (
    log_recommendation_transition,
    log_strategy_generation,
)
from finplan_gateway.config import settings

router = APIRouter()


@router.post("/strategies/generate", response_model=StrategyGenerateResponse)
async def create_strategies(
    request_body: StrategyGenerateRequest,
    request: Request,
    db: Session = Depends(get_db),
    portfolio_client: PortfolioClient = Depends(get_portfolio_client),
):
    """
    Generate strategy recommendations for a user.

    Flow:
    1. Fetch the user's financial snapshot from the portfolio API
    2. Run every analyzer, dedup and rank the findings
    3. Persist new recommendations, skipping keys that are already pending
    4. Return the user's active recommendations with run metadata
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Fetch snapshot
        snapshot = await portfolio_client.get_snapshot(request_body.user_id)

        # 2-3. Analyze and persist
        repository = RecommendationRepository(db)
        result = generate_strategies(
            request_body.user_id,
            lambda _: snapshot,
            repository,
            force_refresh=request_body.force_refresh,
            ttl_days=settings.recommendation_ttl_days,
            max_workers=settings.analyzer_max_workers,
        )

        db.commit()

    except PortfolioAPIError as e:
        portfolio_fetch_failures_counter.inc()
        db.rollback()
        logging.error(f"Portfolio API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Portfolio service unavailable")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # 4. Record metrics and logs for the committed run
    duration_ms = (time.time() - start_time) * 1000
    created_ids = set(result.created_ids)
    record_strategy_generation(
        duration_ms / 1000,
        result.analyzers_failed,
        [rec.finding.category.value for rec in result.recommendations if rec.id in created_ids],
    )
    log_strategy_generation(
        request_id,
        request_body.user_id,
        result.created,
        result.skipped,
        result.analyzers_failed,
        result.data_quality.overall_score,
        duration_ms,
    )

    return StrategyGenerateResponse(
        recommendations=[RecommendationSchema.from_domain(rec) for rec in result.recommendations],
        metadata=GenerationMetadata(
            analyzers_run=result.analyzers_run,
            analyzers_failed=result.analyzers_failed,
            findings_before_dedup=result.findings_before_dedup,
            findings_after_dedup=result.findings_after_dedup,
            created=result.created,
            skipped=result.skipped,
            execution_time_ms=result.execution_time_ms,
            data_quality_score=result.data_quality.overall_score,
            limited_mode=result.data_quality.limited_mode,
            missing_data=result.data_quality.missing_critical,
        ),
    )


@router.get("/strategies", response_model=List[RecommendationSchema])
def list_strategies(user_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Active (pending, unexpired) recommendations, best first"""
    repository = RecommendationRepository(db)
    return [RecommendationSchema.from_domain(rec) for rec in list_recommendations(repository, user_id)]


@router.get("/strategies/{recommendation_id}", response_model=RecommendationSchema)
def get_strategy(recommendation_id: str, user_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    try:
        recommendation = get_recommendation(RecommendationRepository(db), user_id, recommendation_id)
    except RecommendationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return RecommendationSchema.from_domain(recommendation)


@router.patch("/strategies/{recommendation_id}", response_model=RecommendationSchema)
def update_strategy(
    recommendation_id: str,
    request_body: RecommendationUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Accept or dismiss a pending recommendation"""
    request_id = get_request_id(request)

    try:
        recommendation = update_recommendation_status(
            RecommendationRepository(db),
            request_body.user_id,
            recommendation_id,
            request_body.status.upper(),
            request_body.notes,
        )
        db.commit()

        recommendation_transition_counter.labels(status=recommendation.status.value).inc()
        log_recommendation_transition(
            request_id, request_body.user_id, recommendation_id, recommendation.status.value
        )
        return RecommendationSchema.from_domain(recommendation)

    except RecommendationNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidTransitionError as e:
        db.rollback()
        logging.warning(f"Rejected transition: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/strategies/{recommendation_id}/alternatives", response_model=AlternativesResponse)
def list_alternatives(recommendation_id: str, user_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Conservative and aggressive variants of a recommendation"""
    try:
        alternatives = get_alternatives(RecommendationRepository(db), user_id, recommendation_id)
    except RecommendationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return AlternativesResponse(
        recommendation_id=recommendation_id,
        alternatives=[AlternativeSchema.model_validate(alt, from_attributes=True) for alt in alternatives],
    )
