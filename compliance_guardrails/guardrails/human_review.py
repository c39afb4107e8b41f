"""
Human Review Workflow

Lists checks waiting for a reviewer and records reviewer decisions against
the already-logged automated result. Scores and actions on the record are
never recomputed.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Union

from ..storage.base import GuardrailLogStore, LogFilter
from ..utils.exceptions import LogNotFoundError, ReviewError
from ..utils.logging import log_human_review
from .models import GuardrailLogRecord, ReviewDecision, Severity


@dataclass
class ReviewFilter:
    """Options for listing guardrail logs awaiting review"""
    severity: Optional[Union[Severity, str]] = None
    requires_review: Optional[bool] = True
    limit: int = 50
    offset: int = 0


class HumanReviewWorkflow:
    """Reviewer-facing operations over the guardrail log store"""

    def __init__(self, store: GuardrailLogStore, max_page_size: int = 200):
        self.store = store
        self.max_page_size = max_page_size

    async def list_pending(self,
                           organization_id: Optional[str],
                           filters: Optional[ReviewFilter] = None) -> List[GuardrailLogRecord]:
        filters = filters or ReviewFilter()

        if filters.limit < 1 or filters.offset < 0:
            raise ReviewError("limit must be positive and offset non-negative")

        try:
            severity = Severity(filters.severity) if filters.severity is not None else None
        except ValueError as e:
            raise ReviewError(f"Unknown severity: {filters.severity}") from e

        return await self.store.query_logs(LogFilter(
            organization_id=organization_id,
            severity=severity,
            requires_review=filters.requires_review,
            limit=min(filters.limit, self.max_page_size),
            offset=filters.offset,
        ))

    async def get_log(self, log_id: str) -> GuardrailLogRecord:
        record = await self.store.get_log(log_id)
        if record is None:
            raise LogNotFoundError(log_id)
        return record

    async def submit_review(self,
                            log_id: str,
                            reviewed_by: str,
                            decision: Union[ReviewDecision, str],
                            notes: Optional[str] = None) -> GuardrailLogRecord:
        if not reviewed_by:
            raise ReviewError("reviewed_by is required")

        try:
            decision = ReviewDecision(decision)
        except ValueError as e:
            raise ReviewError(f"Unknown review decision: {decision}") from e

        updated = await self.store.update_review(
            log_id,
            reviewed_by,
            decision,
            notes,
            datetime.now(timezone.utc),
        )
        if updated is None:
            log_human_review(log_id, reviewed_by, decision.value, error="log not found")
            raise LogNotFoundError(log_id)

        log_human_review(log_id, reviewed_by, decision.value)
        return updated
