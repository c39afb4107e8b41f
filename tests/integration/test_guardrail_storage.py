"""
Integration tests for the guardrail log stores.
Both backends run the same behavioural checks against real files and SQLite.
"""
import json
import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from compliance_guardrails.guardrails.models import (
    GuardrailAction,
    GuardrailLogRecord,
    ReviewDecision,
    Severity,
)
from compliance_guardrails.storage.base import LogFilter
from compliance_guardrails.storage.file_store import FileGuardrailLogStore
from compliance_guardrails.storage.sql_store import SQLGuardrailLogStore

BASE_TIME = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def make_record(index: int, **overrides) -> GuardrailLogRecord:
    values = dict(
        request_id=f"req-{index}",
        action=GuardrailAction.ALLOWED,
        severity=Severity.LOW,
        sanitized_prompt=f"prompt {index}",
        prompt_risk_score=0.0,
        response_risk_score=0.0,
        model_provider="anthropic",
        model_name="test-model",
        organization_id="org-a",
        created_at=BASE_TIME + timedelta(minutes=index),
    )
    values.update(overrides)
    return GuardrailLogRecord(**values)


@pytest_asyncio.fixture(params=["file", "sql"])
async def store(request, file_store, temp_dir):
    """Each test runs once per storage backend."""
    if request.param == "file":
        yield file_store
        return

    sql_store = SQLGuardrailLogStore.from_url(
        f"sqlite+aiosqlite:///{os.path.join(temp_dir, 'guardrails.db')}"
    )
    await sql_store.create_tables()
    yield sql_store
    await sql_store.close()


class TestGuardrailLogStores:
    """Behaviour shared by all guardrail log stores."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_insert_and_get(self, store):
        record = make_record(
            1,
            pii_detected=True,
            pii_types=["email"],
            pii_redacted=True,
            content_categories=["pii_email"],
            moderation_flags={"hate": 0.1, "pii": 0.8},
            sanitized_response="reply to [REDACTED_EMAIL]",
        )

        log_id = await store.insert_log(record)
        loaded = await store.get_log(log_id)

        assert log_id == record.id
        assert loaded.request_id == "req-1"
        assert loaded.action == GuardrailAction.ALLOWED
        assert loaded.pii_types == ["email"]
        assert loaded.content_categories == ["pii_email"]
        assert loaded.moderation_flags == {"hate": 0.1, "pii": 0.8}
        assert loaded.sanitized_response == "reply to [REDACTED_EMAIL]"
        assert loaded.is_reviewed is False

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_timestamps_are_timezone_aware(self, store):
        """Test that both backends return the same aware UTC instants."""
        plus_two = timezone(timedelta(hours=2))
        record = make_record(1, created_at=datetime(2026, 3, 2, 11, 30, tzinfo=plus_two))
        await store.insert_log(record)
        reviewed_at = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
        await store.update_review(record.id, "reviewer", ReviewDecision.APPROVED, None, reviewed_at)

        loaded = await store.get_log(record.id)

        assert loaded.created_at.tzinfo is not None
        assert loaded.created_at == BASE_TIME
        assert loaded.human_reviewed_at.tzinfo is not None
        assert loaded.human_reviewed_at == reviewed_at

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get_log("does-not-exist") is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_query_newest_first_with_paging(self, store):
        for index in range(5):
            await store.insert_log(make_record(index))

        page = await store.query_logs(LogFilter(limit=2, offset=1))

        assert [r.request_id for r in page] == ["req-3", "req-2"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_query_filters(self, store):
        await store.insert_log(make_record(1))
        await store.insert_log(make_record(
            2, severity=Severity.CRITICAL, action=GuardrailAction.BLOCKED, requires_human_review=True
        ))
        await store.insert_log(make_record(3, organization_id="org-b", requires_human_review=True))

        pending = await store.query_logs(LogFilter(organization_id="org-a", requires_review=True))
        critical = await store.query_logs(LogFilter(severity=Severity.CRITICAL))
        everything = await store.query_logs(LogFilter(limit=None))

        assert [r.request_id for r in pending] == ["req-2"]
        assert [r.request_id for r in critical] == ["req-2"]
        assert len(everything) == 3

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_review(self, store):
        record = make_record(1, requires_human_review=True)
        await store.insert_log(record)
        reviewed_at = BASE_TIME + timedelta(hours=1)

        updated = await store.update_review(
            record.id, "reviewer@example.com", ReviewDecision.APPROVED, "false positive", reviewed_at
        )
        loaded = await store.get_log(record.id)

        assert updated.human_review_decision == ReviewDecision.APPROVED
        assert loaded.human_reviewed_by == "reviewer@example.com"
        assert loaded.human_review_notes == "false positive"
        assert loaded.human_reviewed_at is not None
        # Automated outcome is untouched
        assert loaded.action == record.action
        assert loaded.prompt_risk_score == record.prompt_risk_score

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_latest_review_wins(self, store):
        record = make_record(1)
        await store.insert_log(record)

        await store.update_review(record.id, "first", ReviewDecision.REJECTED, None, BASE_TIME)
        await store.update_review(record.id, "second", ReviewDecision.MODIFIED, "edited", BASE_TIME)
        loaded = await store.get_log(record.id)

        assert loaded.human_reviewed_by == "second"
        assert loaded.human_review_decision == ReviewDecision.MODIFIED

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_reviewed_filter(self, store):
        first, second = make_record(1), make_record(2)
        await store.insert_log(first)
        await store.insert_log(second)
        await store.update_review(first.id, "reviewer", ReviewDecision.APPROVED, None, BASE_TIME)

        unreviewed = await store.query_logs(LogFilter(reviewed=False))
        reviewed = await store.query_logs(LogFilter(reviewed=True))

        assert [r.id for r in unreviewed] == [second.id]
        assert [r.id for r in reviewed] == [first.id]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_review_missing_returns_none(self, store):
        result = await store.update_review(
            "does-not-exist", "reviewer", ReviewDecision.APPROVED, None, BASE_TIME
        )

        assert result is None


class TestFileGuardrailLogStore:
    """File-layout specifics of the JSONL store."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_daily_files(self, file_store):
        await file_store.insert_log(make_record(1))
        await file_store.insert_log(make_record(2, created_at=BASE_TIME + timedelta(days=1)))

        files = sorted(p.name for p in file_store.storage_path.glob("guardrail_logs_*.jsonl"))

        assert files == ["guardrail_logs_2026-03-02.jsonl", "guardrail_logs_2026-03-03.jsonl"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unreadable_lines_are_skipped(self, file_store):
        record = make_record(1)
        await file_store.insert_log(record)
        with open(file_store._get_log_file_path(BASE_TIME), "a", encoding="utf-8") as f:
            f.write("{not json\n")

        records = await file_store.query_logs(LogFilter())

        assert [r.id for r in records] == [record.id]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_reviews_go_to_journal(self, file_store):
        record = make_record(1)
        await file_store.insert_log(record)

        await file_store.update_review(record.id, "reviewer", ReviewDecision.APPROVED, None, BASE_TIME)

        with open(file_store.review_journal_path, "r", encoding="utf-8") as f:
            entries = [json.loads(line) for line in f]
        assert entries[0]["log_id"] == record.id
        assert entries[0]["human_review_decision"] == "approved"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_creates_storage_directory(self, temp_dir):
        path = os.path.join(temp_dir, "nested", "logs")

        FileGuardrailLogStore(path)

        assert os.path.isdir(path)
