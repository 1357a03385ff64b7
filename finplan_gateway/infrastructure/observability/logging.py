"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "finplan-gateway"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_debt_plan(
    request_id: str,
    strategy: str,
    loan_count: int,
    months_to_debt_free: int | None,
    horizon_reached: bool,
    interest_saved: float,
    duration_ms: float,
) -> None:
    """Log structured debt plan outcome"""
    logging.info(
        "Debt plan completed",
        extra={
            "request_id": request_id,
            "step": "debt_plan_complete",
            "strategy": strategy,
            "loan_count": loan_count,
            "months_to_debt_free": months_to_debt_free,
            "horizon_reached": horizon_reached,
            "interest_saved": round(interest_saved, 2),
            "duration_ms": duration_ms,
        },
    )


def log_forecast(request_id: str, scenarios: List[str], years: int, duration_ms: float) -> None:
    logging.info(
        "Forecast completed",
        extra={
            "request_id": request_id,
            "step": "forecast_complete",
            "scenarios": scenarios,
            "years": years,
            "duration_ms": duration_ms,
        },
    )


def log_strategy_generation(
    request_id: str,
    user_id: str,
    created: int,
    skipped: int,
    analyzers_failed: List[str],
    data_quality: float,
    duration_ms: float,
) -> None:
    """Log structured strategy generation outcome for analysis"""
    logging.info(
        "Strategy generation completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "strategy_generation_complete",
            "recommendations_created": created,
            "recommendations_skipped": skipped,
            "analyzers_failed": analyzers_failed,
            "data_quality": data_quality,
            "duration_ms": duration_ms,
        },
    )


def log_recommendation_transition(request_id: str, user_id: str, recommendation_id: str, status: str) -> None:
    logging.info(
        "Recommendation status changed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "recommendation_id": recommendation_id,
            "status": status,
        },
    )
