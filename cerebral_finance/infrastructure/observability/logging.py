"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from cerebral_finance.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines tagged with UTC timestamp, level and service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to stdout as JSON, replacing any prior handlers"""
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    # SQL echo stays off unless explicitly asked for
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def log_profile_generated(
    request_id: str,
    user_id: str,
    output_format: str,
    recommendation_count: int,
    duration_ms: float,
) -> None:
    """One line per generated profile, for latency and recommendation volume"""
    logging.info(
        "Financial profile generated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "profile_complete",
            "output_format": output_format,
            "recommendation_count": recommendation_count,
            "duration_ms": round(duration_ms, 2),
        },
    )


def log_never_amortizes(request_id: str, user_id: str, instrument_name: str, kind: str) -> None:
    """Flag a balance whose payment does not cover its interest"""
    logging.warning(
        "Balance never amortizes at current payment",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "amortization",
            "instrument": instrument_name,
            "kind": kind,
        },
    )
