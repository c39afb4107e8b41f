"""
Configuration package for the guardrails engine.
"""

from .settings import Settings, LogLevel, StorageBackend, get_settings
from .guardrails_config import (
    ActionThresholds,
    GuardrailsConfig,
    ModerationConfig,
    PIIDetectionConfig,
    PromptShieldConfig,
    RiskScoringConfig,
    load_guardrails_config,
)

__all__ = [
    "Settings",
    "LogLevel",
    "StorageBackend",
    "get_settings",
    "ActionThresholds",
    "GuardrailsConfig",
    "ModerationConfig",
    "PIIDetectionConfig",
    "PromptShieldConfig",
    "RiskScoringConfig",
    "load_guardrails_config"
]
