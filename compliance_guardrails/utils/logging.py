"""Logging utilities for the guardrails engine."""

import sys
from datetime import datetime
from typing import Any, Dict, Optional

from loguru import logger

from ..config.settings import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure logging for the application."""
    settings = settings or get_settings()

    # Remove default handler
    logger.remove()

    # Console handler
    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    if settings.debug:
        log_level = "DEBUG"
    else:
        log_level = settings.log_level.value

    logger.add(
        sys.stdout,
        format=log_format,
        level=log_level,
        colorize=True,
        backtrace=True,
        diagnose=settings.debug
    )

    if not settings.log_file:
        return

    # File handler for structured logs; each line is the JSON-serialized record
    logger.add(
        settings.log_file,
        format="{message}",
        level="INFO",
        rotation="1 day",
        retention="30 days",
        compression="gz",
        serialize=True
    )


def log_operation(
    operation: str,
    status: str,
    duration: Optional[float] = None,
    metadata: Optional[Dict[str, Any]] = None,
    error: Optional[str] = None
) -> None:
    """Log an operation with structured metadata."""
    log_data = {
        "operation": operation,
        "status": status,
        "timestamp": datetime.utcnow().isoformat(),
    }

    if duration is not None:
        log_data["duration_ms"] = duration

    if metadata:
        log_data["metadata"] = metadata

    if error:
        log_data["error"] = error

    bound = logger.bind(**log_data)
    if status == "success":
        bound.info(f"Operation completed: {operation}")
    elif status == "error":
        bound.error(f"Operation failed: {operation}")
    else:
        bound.info(f"Operation {status}: {operation}")


def log_guardrail_decision(
    request_id: str,
    action: str,
    severity: str,
    prompt_risk_score: float,
    response_risk_score: float,
    duration: Optional[float] = None,
    log_id: Optional[str] = None
) -> None:
    """Log a guardrail decision. Never receives prompt or response text."""
    metadata = {
        "request_id": request_id,
        "action": action,
        "severity": severity,
        "prompt_risk_score": prompt_risk_score,
        "response_risk_score": response_risk_score,
        "log_id": log_id,
    }

    log_operation(
        operation="guardrail_check",
        status="success",
        duration=duration,
        metadata=metadata
    )


def log_human_review(
    log_id: str,
    reviewed_by: str,
    decision: str,
    error: Optional[str] = None
) -> None:
    """Log a human review submission."""
    log_operation(
        operation="human_review",
        status="error" if error else "success",
        metadata={"log_id": log_id, "reviewed_by": reviewed_by, "decision": decision},
        error=error
    )
