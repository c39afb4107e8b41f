"""
Action Arbiter

Maps prompt/response risk scores and PII findings to a single terminal
action. The checks run in a fixed order and the first match wins; the
human-review band (8.5, 10) overlaps the elevated-block rule (> 7.0) and
rule order decides between them.
"""
from dataclasses import dataclass
from typing import Optional

from ..config.guardrails_config import ActionThresholds
from .models import GuardrailAction, Severity


@dataclass(frozen=True)
class ArbiterDecision:
    action: GuardrailAction
    severity: Severity
    requires_human_review: bool

    @property
    def allowed(self) -> bool:
        return self.action.permits_request


class ActionArbiter:
    """Pure decision function over scores, PII flag and severity"""

    def __init__(self, thresholds: Optional[ActionThresholds] = None):
        self.thresholds = thresholds or ActionThresholds()

    def determine_severity(self, prompt_risk_score: float, response_risk_score: float) -> Severity:
        t = self.thresholds
        max_score = max(prompt_risk_score, response_risk_score)

        if max_score >= t.severity_critical:
            return Severity.CRITICAL
        if max_score >= t.severity_high:
            return Severity.HIGH
        if max_score >= t.severity_medium:
            return Severity.MEDIUM
        return Severity.LOW

    def requires_human_review(self, prompt_risk_score: float) -> bool:
        return self.thresholds.human_review_floor < prompt_risk_score < self.thresholds.hard_block

    def decide_action(self,
                      prompt_risk_score: float,
                      response_risk_score: float,
                      pii_detected: bool,
                      severity: Severity) -> GuardrailAction:
        t = self.thresholds

        if prompt_risk_score >= t.hard_block or response_risk_score >= t.hard_block:
            return GuardrailAction.BLOCKED
        if (severity == Severity.CRITICAL
                or prompt_risk_score >= t.block
                or response_risk_score >= t.block):
            return GuardrailAction.BLOCKED
        if self.requires_human_review(prompt_risk_score):
            return GuardrailAction.HUMAN_REVIEW_REQUIRED
        if prompt_risk_score > t.elevated_block or response_risk_score > t.elevated_block:
            return GuardrailAction.BLOCKED
        if pii_detected:
            return GuardrailAction.REDACTED
        if prompt_risk_score > t.flag:
            return GuardrailAction.FLAGGED
        return GuardrailAction.ALLOWED

    def arbitrate(self,
                  prompt_risk_score: float,
                  response_risk_score: float,
                  pii_detected: bool) -> ArbiterDecision:
        severity = self.determine_severity(prompt_risk_score, response_risk_score)
        return ArbiterDecision(
            action=self.decide_action(prompt_risk_score, response_risk_score, pii_detected, severity),
            severity=severity,
            requires_human_review=self.requires_human_review(prompt_risk_score)
        )
