"""Unit tests for logging utilities."""

import json
import os
import sys

import pytest
from loguru import logger

from compliance_guardrails.config.settings import Settings
from compliance_guardrails.utils.logging import (
    log_guardrail_decision,
    log_human_review,
    log_operation,
    setup_logging,
)


@pytest.fixture
def captured():
    """Collect loguru records emitted during a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


class TestOperationLogging:
    """Test cases for structured operation logging."""

    @pytest.mark.unit
    def test_log_operation_binds_metadata(self, captured):
        log_operation("guardrail_check", "success", duration=12, metadata={"action": "allowed"})

        record = captured[-1]
        assert record["level"].name == "INFO"
        assert record["extra"]["operation"] == "guardrail_check"
        assert record["extra"]["duration_ms"] == 12
        assert record["extra"]["metadata"] == {"action": "allowed"}

    @pytest.mark.unit
    def test_error_status_logs_error(self, captured):
        log_operation("human_review", "error", error="log not found")

        record = captured[-1]
        assert record["level"].name == "ERROR"
        assert record["extra"]["error"] == "log not found"

    @pytest.mark.unit
    def test_guardrail_decision_metadata(self, captured):
        log_guardrail_decision("req-1", "blocked", "critical", 10.0, 0.0, duration=4, log_id="log-1")

        metadata = captured[-1]["extra"]["metadata"]
        assert metadata == {
            "request_id": "req-1",
            "action": "blocked",
            "severity": "critical",
            "prompt_risk_score": 10.0,
            "response_risk_score": 0.0,
            "log_id": "log-1",
        }

    @pytest.mark.unit
    def test_human_review_failure(self, captured):
        log_human_review("log-1", "reviewer", "approved", error="log not found")

        assert captured[-1]["level"].name == "ERROR"
        assert captured[-1]["extra"]["metadata"]["reviewed_by"] == "reviewer"


class TestSetupLogging:
    """Test cases for sink configuration."""

    @pytest.mark.unit
    def test_file_sink_is_serialized(self, temp_dir):
        log_file = os.path.join(temp_dir, "guardrails.log")

        setup_logging(Settings(log_file=log_file))
        try:
            logger.info("sink check")
        finally:
            logger.remove()
            logger.add(sys.stderr)

        with open(log_file, "r", encoding="utf-8") as f:
            entry = json.loads(f.readline())
        assert entry["record"]["message"] == "sink check"
