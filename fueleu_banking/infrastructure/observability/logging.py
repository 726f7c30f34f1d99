"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "fueleu-banking"


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_banking_operation(
    request_id: str,
    operation: str,
    ship_id: str,
    year: int,
    amount: Decimal,
    cb_before: Decimal,
    cb_after: Decimal,
    bank_after: Decimal,
) -> None:
    """Log a committed bank/apply transition for audit"""
    logging.info(
        "Banking operation committed",
        extra={
            "request_id": request_id,
            "step": "banking_commit",
            "operation": operation,
            "ship_id": ship_id,
            "year": year,
            "amount_gco2eq": str(amount),
            "cb_before": str(cb_before),
            "cb_after": str(cb_after),
            "bank_after": str(bank_after),
        },
    )


def log_banking_rejection(
    request_id: str,
    operation: str,
    ship_id: str,
    year: int,
    amount: Any,
    error_code: str,
    reason: str,
) -> None:
    """Log a request rejected by a banking rule"""
    logging.warning(
        "Banking operation rejected",
        extra={
            "request_id": request_id,
            "step": "banking_rejected",
            "operation": operation,
            "ship_id": ship_id,
            "year": year,
            "amount_gco2eq": str(amount),
            "error_code": error_code,
            "reason": reason,
        },
    )
