"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from ledger_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


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


def log_schedule_materialized(
    workspace_id: str,
    parent_id: int,
    trigger: str,
    months: int,
    estimated_total_fee: int,
    children_deleted: int = 0,
) -> None:
    """Log a freshly written installment schedule"""
    logging.info(
        "Installment schedule materialized",
        extra={
            "workspace_id": workspace_id,
            "entry_id": parent_id,
            "step": f"schedule_{trigger}",
            "months": months,
            "estimated_total_fee": estimated_total_fee,
            "children_deleted": children_deleted,
        },
    )


def log_entry_deleted(workspace_id: str, entry_id: int, role: str, children_deleted: int) -> None:
    """Log deletion of an entry and its cascade"""
    logging.info(
        "Ledger entry deleted",
        extra={
            "workspace_id": workspace_id,
            "entry_id": entry_id,
            "step": "entry_deleted",
            "role": role,
            "children_deleted": children_deleted,
        },
    )


def log_rollback(workspace_id: str, entry_id: Optional[int], reason: str, error: Exception) -> None:
    """Log an aborted multi-row transition"""
    logging.error(
        f"Ledger transaction rolled back: {error}",
        extra={
            "workspace_id": workspace_id,
            "entry_id": entry_id,
            "step": "rollback",
            "reason": reason,
        },
    )
