"""
Guardrails Engine

Runs every prompt (and, when supplied, the model response) through the prompt
shield, PII redaction, risk scoring and action arbitration, persists a
sanitized audit record, and returns the decision to the caller.
"""
import time
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Protocol, Union

from loguru import logger

from ..config.guardrails_config import GuardrailsConfig
from ..storage.base import GuardrailLogStore
from ..utils.exceptions import AnalysisError, ContextError
from ..utils.logging import log_guardrail_decision
from .action_arbiter import ActionArbiter
from .compliance_logger import GuardrailAuditLogger
from .models import (
    GuardrailAction,
    GuardrailCheckResult,
    GuardrailContext,
    GuardrailLogRecord,
    ModerationFlags,
    Severity,
)
from .moderation import ModerationEstimator
from .pii_detector import PIIDetector
from .prompt_shield import PromptShield
from .risk_scorer import PromptRiskScorer, ResponseAnalyzer


class ReviewQueue(Protocol):
    """Receives checks that need a human decision"""

    async def enqueue(self, record: GuardrailLogRecord) -> None:
        ...


@dataclass(frozen=True)
class GuardrailDecision:
    """Outcome of the analysis stage, before persistence"""
    action: GuardrailAction
    severity: Severity
    sanitized_prompt: str
    sanitized_response: Optional[str]
    pii_detected: bool
    pii_types: List[str]
    prompt_risk_score: float
    response_risk_score: float
    requires_human_review: bool
    content_categories: List[str]
    moderation_flags: ModerationFlags
    risk_factors: List[str] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return self.action.permits_request

    def to_result(self, log_id: Optional[str]) -> GuardrailCheckResult:
        return GuardrailCheckResult(
            allowed=self.allowed,
            action=self.action,
            severity=self.severity,
            sanitized_prompt=self.sanitized_prompt,
            sanitized_response=self.sanitized_response,
            pii_detected=self.pii_detected,
            pii_types=list(self.pii_types),
            prompt_risk_score=self.prompt_risk_score,
            response_risk_score=self.response_risk_score,
            requires_human_review=self.requires_human_review,
            content_categories=list(self.content_categories),
            moderation_flags=self.moderation_flags,
            log_id=log_id,
        )


class GuardrailsEngine:
    """Coordinates all guardrail checks for a single prompt/response pair"""

    def __init__(self,
                 store: GuardrailLogStore,
                 config: Optional[GuardrailsConfig] = None,
                 review_queue: Optional[ReviewQueue] = None):
        self.config = config or GuardrailsConfig()
        self.review_queue = review_queue

        # Individual guardrail components; all stateless between calls
        self.prompt_shield = PromptShield(self.config.prompt_shield)
        self.pii_detector = PIIDetector(self.config.pii_detection)
        self.prompt_scorer = PromptRiskScorer(self.config.risk_scoring)
        self.response_analyzer = ResponseAnalyzer(self.config.risk_scoring, self.pii_detector)
        self.arbiter = ActionArbiter(self.config.thresholds)
        self.moderation = ModerationEstimator(self.config.moderation)
        self.audit_logger = GuardrailAuditLogger(store, self.config.guardrail_type)

    def evaluate(self, prompt: str, response: Optional[str] = None) -> GuardrailDecision:
        """Analyze a prompt/response pair without side effects"""
        # 1. Prompt shield
        shield_result = self.prompt_shield.scan(prompt)

        # 2. PII detection and redaction
        prompt_pii = self.pii_detector.detect_pii(prompt)

        # 3. Prompt risk
        prompt_risk_score = self.prompt_scorer.score(prompt, shield_result)

        # 4. Response analysis
        response_analysis = self.response_analyzer.analyze(response)
        response_pii = response_analysis.pii_result

        pii_detected = prompt_pii.detected or response_pii.detected
        pii_types = list(dict.fromkeys(prompt_pii.types + response_pii.types))

        # 5. Action and severity
        arbiter_decision = self.arbiter.arbitrate(
            prompt_risk_score, response_analysis.risk_score, pii_detected
        )

        # 6. Content categorization
        content_categories = (
            [f"pii_{pii_type}" for pii_type in pii_types]
            + shield_result.risk_factors
            + response_analysis.content_categories
        )

        return GuardrailDecision(
            action=arbiter_decision.action,
            severity=arbiter_decision.severity,
            sanitized_prompt=prompt_pii.sanitized,
            sanitized_response=response_analysis.sanitized_response,
            pii_detected=pii_detected,
            pii_types=pii_types,
            prompt_risk_score=prompt_risk_score,
            response_risk_score=response_analysis.risk_score,
            requires_human_review=arbiter_decision.requires_human_review,
            content_categories=content_categories,
            moderation_flags=self.moderation.estimate(prompt, response),
            risk_factors=list(shield_result.risk_factors),
        )

    async def check_guardrails(self,
                               prompt: str,
                               response: Optional[str],
                               context: Union[GuardrailContext, Mapping[str, Any]]) -> GuardrailCheckResult:
        """Run all checks, persist the audit record and return the decision.

        Raises ContextError when the context is not a mapping or the request id
        is missing. Any other failure,
        including a failed audit write, yields a blocked result.
        """
        start_time = time.perf_counter()

        context = GuardrailContext.coerce(context)
        if not context.request_id:
            raise ContextError("request_id is required in context")

        try:
            try:
                decision = self.evaluate(prompt, response)
            except Exception as e:
                raise AnalysisError(f"Guardrail analysis failed: {type(e).__name__}") from e

            processing_time_ms = int((time.perf_counter() - start_time) * 1000)

            # Logged before the audit write; the log id appears in the AUDIT line
            log_guardrail_decision(
                request_id=context.request_id,
                action=decision.action.value,
                severity=decision.severity.value,
                prompt_risk_score=decision.prompt_risk_score,
                response_risk_score=decision.response_risk_score,
                duration=processing_time_ms,
            )

            record = await self.audit_logger.log_check(decision, context, processing_time_ms)

            if decision.action == GuardrailAction.HUMAN_REVIEW_REQUIRED and self.review_queue:
                await self.review_queue.enqueue(record)

            return decision.to_result(record.id)

        except Exception as e:
            logger.error(
                f"Guardrails check failed for request {context.request_id}: "
                f"{type(e).__name__}: {e}"
            )
            # Fail secure - if guardrails fail, block the request
            return GuardrailCheckResult.fail_secure()
