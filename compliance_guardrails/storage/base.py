"""
Guardrail log storage interface.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..guardrails.models import GuardrailLogRecord, ReviewDecision, Severity


@dataclass
class LogFilter:
    """Filter criteria for guardrail log queries"""
    organization_id: Optional[str] = None
    severity: Optional[Severity] = None
    requires_review: Optional[bool] = None
    reviewed: Optional[bool] = None
    limit: Optional[int] = 50
    offset: int = 0

    def matches(self, record: GuardrailLogRecord) -> bool:
        if self.organization_id is not None and record.organization_id != self.organization_id:
            return False
        if self.severity is not None and record.severity != self.severity:
            return False
        if self.requires_review is not None and record.requires_human_review != self.requires_review:
            return False
        if self.reviewed is not None and record.is_reviewed != self.reviewed:
            return False
        return True


class GuardrailLogStore(ABC):
    """Abstract base class for guardrail log storage backends"""

    @abstractmethod
    async def insert_log(self, record: GuardrailLogRecord) -> str:
        """Store a new record and return its id"""
        pass

    @abstractmethod
    async def get_log(self, log_id: str) -> Optional[GuardrailLogRecord]:
        """Fetch a single record, or None"""
        pass

    @abstractmethod
    async def query_logs(self, filter_criteria: LogFilter) -> List[GuardrailLogRecord]:
        """Records matching the filter, newest first"""
        pass

    @abstractmethod
    async def update_review(self,
                            log_id: str,
                            reviewed_by: str,
                            decision: ReviewDecision,
                            notes: Optional[str],
                            reviewed_at: datetime) -> Optional[GuardrailLogRecord]:
        """Write the human-review fields of a record; None if it does not exist"""
        pass

    async def close(self) -> None:
        """Release backend resources"""
        pass
