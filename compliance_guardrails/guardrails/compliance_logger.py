"""
Guardrail Audit Logger

Persists one sanitized record per guardrails check. Only redacted prompt and
response text ever reaches the store; a storage failure propagates so the
calling check fails closed.
"""
from typing import Optional

from loguru import logger

from ..storage.base import GuardrailLogStore
from ..utils.exceptions import PersistenceError
from .models import GuardrailContext, GuardrailLogRecord


class GuardrailAuditLogger:
    """Audit-or-block logger for guardrail decisions"""

    def __init__(self, store: GuardrailLogStore, guardrail_type: str = "comprehensive"):
        self.store = store
        self.guardrail_type = guardrail_type
        self.logger = logger.bind(audit=True)

    def build_record(self,
                     decision,
                     context: GuardrailContext,
                     processing_time_ms: Optional[int] = None) -> GuardrailLogRecord:
        """Assemble the persisted record from a decision's sanitized fields"""
        return GuardrailLogRecord(
            request_id=context.request_id,
            organization_id=context.organization_id,
            user_id=context.user_id,
            guardrail_type=self.guardrail_type,
            action=decision.action,
            severity=decision.severity,
            sanitized_prompt=decision.sanitized_prompt,
            sanitized_response=decision.sanitized_response,
            prompt_risk_score=decision.prompt_risk_score,
            response_risk_score=decision.response_risk_score,
            pii_detected=decision.pii_detected,
            pii_types=list(decision.pii_types),
            pii_redacted=decision.pii_detected,
            content_categories=list(decision.content_categories),
            moderation_flags=decision.moderation_flags.to_dict(),
            requires_human_review=decision.requires_human_review,
            model_provider=context.model_provider,
            model_name=context.model_name,
            processing_time_ms=processing_time_ms,
            ip_address=context.ip_address,
        )

    async def log_check(self,
                        decision,
                        context: GuardrailContext,
                        processing_time_ms: Optional[int] = None) -> GuardrailLogRecord:
        """Persist the check and return the stored record"""
        record = self.build_record(decision, context, processing_time_ms)

        try:
            log_id = await self.store.insert_log(record)
        except PersistenceError:
            self.logger.error(f"AUDIT: failed to persist guardrail check {context.request_id}")
            raise
        except Exception as e:
            self.logger.error(f"AUDIT: failed to persist guardrail check {context.request_id}")
            raise PersistenceError(f"Failed to log guardrail check: {e}") from e

        if not log_id:
            raise PersistenceError("Guardrail log store returned no id")

        record.id = log_id
        self.logger.info(
            f"AUDIT: {self.guardrail_type} - {decision.action.value} "
            f"(severity={decision.severity.value}, request_id={context.request_id}, log_id={log_id})"
        )
        return record
