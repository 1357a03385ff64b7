"""POST /v1/forecast - net worth projection endpoints"""

import time
import logging
from dataclasses import asdict
from fastapi import APIRouter, HTTPException, Request

from finplan_gateway.api.v1.schemas import (
    ForecastCompareRequest,
    ForecastCompareResponse,
    ForecastRequest,
    ForecastResponse,
)
from finplan_gateway.api.dependencies import get_request_id
from finplan_gateway.domain.forecast import compare_scenarios, generate_forecast
from finplan_gateway.domain.exceptions import ConfigurationError
from finplan_gateway.infrastructure.observability.metrics import forecast_counter
from finplan_gateway.infrastructure.observability.logging import log_forecast

router = APIRouter()


@router.post("/forecast", response_model=ForecastResponse)
def create_forecast(request_body: ForecastRequest, request: Request):
    """Project a snapshot forward under one scenario"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = generate_forecast(
            request_body.snapshot.to_domain(),
            custom_assumptions=request_body.custom_assumptions,
            scenario=request_body.scenario.upper(),
            years=request_body.years,
            debt_plan=request_body.debt_plan.to_domain() if request_body.debt_plan else None,
        )

        forecast_counter.labels(scenario=result.scenario.value).inc()
        log_forecast(request_id, [result.scenario.value], result.years, (time.time() - start_time) * 1000)

        return ForecastResponse.model_validate(asdict(result))

    except ConfigurationError as e:
        logging.warning(f"Invalid forecast configuration: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/forecast/compare", response_model=ForecastCompareResponse)
def compare_forecasts(request_body: ForecastCompareRequest, request: Request):
    """Project a snapshot under every scenario side by side"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        comparison = compare_scenarios(
            request_body.snapshot.to_domain(),
            custom_assumptions=request_body.custom_assumptions,
            years=request_body.years,
            debt_plan=request_body.debt_plan.to_domain() if request_body.debt_plan else None,
        )

        for scenario in comparison.results:
            forecast_counter.labels(scenario=scenario.value).inc()
        log_forecast(
            request_id,
            [scenario.value for scenario in comparison.results],
            comparison.years,
            (time.time() - start_time) * 1000,
        )

        return ForecastCompareResponse(
            years=comparison.years,
            scenarios={
                scenario.value: ForecastResponse.model_validate(asdict(result))
                for scenario, result in comparison.results.items()
            },
            comparison=comparison.comparison,
        )

    except ConfigurationError as e:
        logging.warning(f"Invalid forecast configuration: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
