"""
SQLAlchemy guardrail log storage (async).
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from ..guardrails.models import GuardrailAction, GuardrailLogRecord, ReviewDecision, Severity
from ..utils.exceptions import PersistenceError
from .base import GuardrailLogStore, LogFilter

Base = declarative_base()


class GuardrailLogModel(Base):
    """One row per guardrails check; prompt and response columns hold sanitized text"""
    __tablename__ = "ai_guardrails_logs"

    id = Column(String(36), primary_key=True)
    organization_id = Column(String(255), nullable=True, index=True)
    user_id = Column(String(255), nullable=True)
    request_id = Column(String(255), nullable=False, index=True)
    guardrail_type = Column(String(50), nullable=False)
    action = Column(String(32), nullable=False)
    severity = Column(String(16), nullable=False, index=True)
    sanitized_prompt = Column(Text, nullable=True)
    prompt_risk_score = Column(Float, nullable=False)
    pii_detected = Column(Boolean, nullable=False, default=False)
    pii_types = Column(JSON, nullable=True)
    pii_redacted = Column(Boolean, nullable=False, default=False)
    sanitized_response = Column(Text, nullable=True)
    response_risk_score = Column(Float, nullable=False)
    content_categories = Column(JSON, nullable=True)
    moderation_flags = Column(JSON, nullable=True)
    requires_human_review = Column(Boolean, nullable=False, default=False, index=True)
    human_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    human_reviewed_by = Column(String(255), nullable=True)
    human_review_decision = Column(String(16), nullable=True)
    human_review_notes = Column(Text, nullable=True)
    model_provider = Column(String(100), nullable=True)
    model_name = Column(String(100), nullable=True)
    processing_time_ms = Column(Integer, nullable=True)
    ip_address = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    @classmethod
    def from_record(cls, record: GuardrailLogRecord) -> 'GuardrailLogModel':
        return cls(
            id=record.id,
            organization_id=record.organization_id,
            user_id=record.user_id,
            request_id=record.request_id,
            guardrail_type=record.guardrail_type,
            action=record.action.value,
            severity=record.severity.value,
            sanitized_prompt=record.sanitized_prompt,
            prompt_risk_score=record.prompt_risk_score,
            pii_detected=record.pii_detected,
            pii_types=list(record.pii_types),
            pii_redacted=record.pii_redacted,
            sanitized_response=record.sanitized_response,
            response_risk_score=record.response_risk_score,
            content_categories=list(record.content_categories),
            moderation_flags=dict(record.moderation_flags),
            requires_human_review=record.requires_human_review,
            model_provider=record.model_provider,
            model_name=record.model_name,
            processing_time_ms=record.processing_time_ms,
            ip_address=record.ip_address,
            created_at=record.created_at.astimezone(timezone.utc),
        )

    def to_record(self) -> GuardrailLogRecord:
        return GuardrailLogRecord(
            id=self.id,
            organization_id=self.organization_id,
            user_id=self.user_id,
            request_id=self.request_id,
            guardrail_type=self.guardrail_type,
            action=GuardrailAction(self.action),
            severity=Severity(self.severity),
            sanitized_prompt=self.sanitized_prompt,
            prompt_risk_score=self.prompt_risk_score,
            pii_detected=self.pii_detected,
            pii_types=list(self.pii_types or []),
            pii_redacted=self.pii_redacted,
            sanitized_response=self.sanitized_response,
            response_risk_score=self.response_risk_score,
            content_categories=list(self.content_categories or []),
            moderation_flags=dict(self.moderation_flags or {}),
            requires_human_review=self.requires_human_review,
            human_reviewed_at=_as_utc(self.human_reviewed_at),
            human_reviewed_by=self.human_reviewed_by,
            human_review_decision=(
                ReviewDecision(self.human_review_decision) if self.human_review_decision else None
            ),
            human_review_notes=self.human_review_notes,
            model_provider=self.model_provider,
            model_name=self.model_name,
            processing_time_ms=self.processing_time_ms,
            ip_address=self.ip_address,
            created_at=_as_utc(self.created_at),
        )


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops the offset of timezone-aware columns; values are stored as UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLGuardrailLogStore(GuardrailLogStore):
    """Relational guardrail log storage; one session per operation"""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> 'SQLGuardrailLogStore':
        return cls(create_async_engine(database_url, echo=echo, pool_pre_ping=True))

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def insert_log(self, record: GuardrailLogRecord) -> str:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(GuardrailLogModel.from_record(record))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to store guardrail log: {e}") from e
        return record.id

    async def get_log(self, log_id: str) -> Optional[GuardrailLogRecord]:
        try:
            async with self.session_factory() as session:
                row = await session.get(GuardrailLogModel, log_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load guardrail log {log_id}: {e}") from e
        return row.to_record() if row else None

    async def query_logs(self, filter_criteria: LogFilter) -> List[GuardrailLogRecord]:
        stmt = select(GuardrailLogModel)
        if filter_criteria.organization_id is not None:
            stmt = stmt.where(GuardrailLogModel.organization_id == filter_criteria.organization_id)
        if filter_criteria.severity is not None:
            stmt = stmt.where(GuardrailLogModel.severity == filter_criteria.severity.value)
        if filter_criteria.requires_review is not None:
            stmt = stmt.where(GuardrailLogModel.requires_human_review == filter_criteria.requires_review)
        if filter_criteria.reviewed is True:
            stmt = stmt.where(GuardrailLogModel.human_review_decision.is_not(None))
        elif filter_criteria.reviewed is False:
            stmt = stmt.where(GuardrailLogModel.human_review_decision.is_(None))

        stmt = stmt.order_by(GuardrailLogModel.created_at.desc()).offset(filter_criteria.offset)
        if filter_criteria.limit is not None:
            stmt = stmt.limit(filter_criteria.limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to query guardrail logs: {e}") from e
        return [row.to_record() for row in rows]

    async def update_review(self,
                            log_id: str,
                            reviewed_by: str,
                            decision: ReviewDecision,
                            notes: Optional[str],
                            reviewed_at: datetime) -> Optional[GuardrailLogRecord]:
        stmt = (
            update(GuardrailLogModel)
            .where(GuardrailLogModel.id == log_id)
            .values(
                human_reviewed_by=reviewed_by,
                human_review_decision=decision.value,
                human_review_notes=notes,
                human_reviewed_at=reviewed_at.astimezone(timezone.utc),
            )
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                if result.rowcount == 0:
                    return None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to store human review for {log_id}: {e}") from e
        return await self.get_log(log_id)

    async def close(self) -> None:
        await self.engine.dispose()
