"""
File-based guardrail log storage.

Check records go to daily ``guardrail_logs_YYYY-MM-DD.jsonl`` files. Human
reviews are appended to ``guardrail_reviews.jsonl`` and merged into the
records when they are read, so no line is ever rewritten.
"""
import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from ..guardrails.models import GuardrailLogRecord, ReviewDecision
from ..utils.exceptions import PersistenceError
from .base import GuardrailLogStore, LogFilter

REVIEW_JOURNAL = "guardrail_reviews.jsonl"


class FileGuardrailLogStore(GuardrailLogStore):
    """Append-only JSONL guardrail log storage"""

    def __init__(self, storage_path: str):
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()

    def _get_log_file_path(self, date: datetime) -> Path:
        """Get log file path for given date"""
        date_str = date.strftime("%Y-%m-%d")
        return self.storage_path / f"guardrail_logs_{date_str}.jsonl"

    @property
    def review_journal_path(self) -> Path:
        return self.storage_path / REVIEW_JOURNAL

    def _append(self, path: Path, payload: Dict) -> None:
        line = json.dumps(payload) + "\n"
        with self._write_lock:
            with open(path, "a", encoding="utf-8") as f:
                f.write(line)

    async def insert_log(self, record: GuardrailLogRecord) -> str:
        try:
            self._append(self._get_log_file_path(record.created_at), record.to_dict())
        except OSError as e:
            raise PersistenceError(f"Failed to store guardrail log: {e}") from e
        return record.id

    async def get_log(self, log_id: str) -> Optional[GuardrailLogRecord]:
        for record in self._load_records():
            if record.id == log_id:
                return record
        return None

    async def query_logs(self, filter_criteria: LogFilter) -> List[GuardrailLogRecord]:
        records = [r for r in self._load_records() if filter_criteria.matches(r)]
        records.sort(key=lambda r: r.created_at, reverse=True)

        # Apply offset and limit
        records = records[filter_criteria.offset:]
        if filter_criteria.limit is not None:
            records = records[:filter_criteria.limit]
        return records

    async def update_review(self,
                            log_id: str,
                            reviewed_by: str,
                            decision: ReviewDecision,
                            notes: Optional[str],
                            reviewed_at: datetime) -> Optional[GuardrailLogRecord]:
        record = await self.get_log(log_id)
        if record is None:
            return None

        entry = {
            "log_id": log_id,
            "human_reviewed_by": reviewed_by,
            "human_review_decision": decision.value,
            "human_review_notes": notes,
            "human_reviewed_at": reviewed_at.isoformat(),
        }
        try:
            self._append(self.review_journal_path, entry)
        except OSError as e:
            raise PersistenceError(f"Failed to store human review: {e}") from e

        return record.with_review(reviewed_by, decision, notes, reviewed_at)

    def _load_reviews(self) -> Dict[str, Dict]:
        reviews: Dict[str, Dict] = {}
        if not self.review_journal_path.exists():
            return reviews

        with open(self.review_journal_path, "r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"Skipping unreadable review entry: {e}")
                    continue
                # Later entries supersede earlier ones for the same record
                reviews[entry["log_id"]] = entry
        return reviews

    def _load_records(self) -> List[GuardrailLogRecord]:
        reviews = self._load_reviews()
        records: List[GuardrailLogRecord] = []

        for log_file in sorted(self.storage_path.glob("guardrail_logs_*.jsonl")):
            with open(log_file, "r", encoding="utf-8") as f:
                for line in f:
                    if not line.strip():
                        continue
                    try:
                        record = GuardrailLogRecord.from_dict(json.loads(line))
                    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                        logger.warning(f"Skipping unreadable guardrail log in {log_file.name}: {e}")
                        continue

                    review = reviews.get(record.id)
                    if review:
                        record = record.with_review(
                            review["human_reviewed_by"],
                            ReviewDecision(review["human_review_decision"]),
                            review.get("human_review_notes"),
                            datetime.fromisoformat(review["human_reviewed_at"]),
                        )
                    records.append(record)
        return records
