"""
Compliance Guardrails

Safety policy engine for AI requests and responses: prompt-injection and PII
detection, risk scoring, action arbitration, sanitized audit logging and
human review.
"""

from .guardrails import (
    GuardrailAction,
    GuardrailCheckResult,
    GuardrailContext,
    GuardrailsEngine,
    HumanReviewWorkflow,
    ReviewDecision,
    ReviewFilter,
    Severity,
)
from .config import GuardrailsConfig, Settings, get_settings, load_guardrails_config
from .storage import FileGuardrailLogStore, SQLGuardrailLogStore, create_log_store
from .utils.exceptions import ContextError, GuardrailsException, LogNotFoundError, ReviewError


def create_engine_from_settings(settings=None) -> GuardrailsEngine:
    """Engine wired to the store and policy file named in ``settings``"""
    settings = settings or get_settings()
    return GuardrailsEngine(
        store=create_log_store(settings),
        config=load_guardrails_config(settings.config_path),
    )


__all__ = [
    "GuardrailAction",
    "GuardrailCheckResult",
    "GuardrailContext",
    "GuardrailsEngine",
    "HumanReviewWorkflow",
    "ReviewDecision",
    "ReviewFilter",
    "Severity",
    "GuardrailsConfig",
    "Settings",
    "get_settings",
    "load_guardrails_config",
    "FileGuardrailLogStore",
    "SQLGuardrailLogStore",
    "create_log_store",
    "ContextError",
    "GuardrailsException",
    "LogNotFoundError",
    "ReviewError",
    "create_engine_from_settings"
]

__version__ = "1.0.0"
