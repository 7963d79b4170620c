"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from payment_scheduler.domain.models import SchedulingResult


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service name"""

    def __init__(self, *args, service_name: str = "payment-scheduler", **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "payment-scheduler") -> None:
    """Configure structured JSON logging on the root logger"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_schedule_result(request_id: str, result: SchedulingResult, duration_ms: float) -> None:
    """Log smart-schedule outcome for analysis"""
    logging.info(
        "Smart schedule completed",
        extra={
            "request_id": request_id,
            "step": "smart_schedule_complete",
            "budget": str(result.budget),
            "total_needed": str(result.total_needed),
            "scheduled_total": str(result.scheduled_total),
            "scheduled_count": len(result.scheduled_items),
            "deferred_count": len(result.deferred_items),
            "critical_count": len(result.critical_items),
            "skipped_count": len(result.skipped_ids),
            "over_budget": result.is_over_budget,
            "duration_ms": duration_ms,
        },
    )
