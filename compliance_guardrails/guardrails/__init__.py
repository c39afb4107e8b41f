"""
AI Guardrails Engine

Intercepts prompts sent to language models and the responses they return,
and decides whether each exchange may proceed.

Components:
- Prompt Shield: Detects prompt-injection phrases and suspicious markup
- PII Detector: Detects and redacts personally identifiable information
- Risk Scorer / Response Analyzer: Bounded 0-10 prompt and response scores
- Action Arbiter: Maps scores to allowed/redacted/flagged/review/blocked
- Moderation Estimator: Auxiliary category flags for reporting
- Guardrail Audit Logger: Sanitized, audit-or-block persistence
- Human Review Workflow: Reviewer decisions on logged checks
- Guardrails Engine: Coordinates all guardrail checks
"""

from .models import (
    GuardrailAction,
    GuardrailCheckResult,
    GuardrailContext,
    GuardrailLogRecord,
    ModerationFlags,
    ReviewDecision,
    Severity,
)
from .prompt_shield import PromptShield, PromptShieldResult
from .pii_detector import PIIDetector, PIIDetectionResult
from .risk_scorer import PromptRiskScorer, ResponseAnalyzer, ResponseAnalysis
from .action_arbiter import ActionArbiter, ArbiterDecision
from .moderation import ModerationEstimator
from .compliance_logger import GuardrailAuditLogger
from .human_review import HumanReviewWorkflow, ReviewFilter
from .guardrails_orchestrator import GuardrailDecision, GuardrailsEngine, ReviewQueue

__all__ = [
    "GuardrailAction",
    "GuardrailCheckResult",
    "GuardrailContext",
    "GuardrailLogRecord",
    "ModerationFlags",
    "ReviewDecision",
    "Severity",
    "PromptShield",
    "PromptShieldResult",
    "PIIDetector",
    "PIIDetectionResult",
    "PromptRiskScorer",
    "ResponseAnalyzer",
    "ResponseAnalysis",
    "ActionArbiter",
    "ArbiterDecision",
    "ModerationEstimator",
    "GuardrailAuditLogger",
    "HumanReviewWorkflow",
    "ReviewFilter",
    "GuardrailDecision",
    "GuardrailsEngine",
    "ReviewQueue"
]

__version__ = "1.0.0"
