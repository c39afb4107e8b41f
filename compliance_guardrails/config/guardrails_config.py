"""
Guardrails Policy Configuration

Keyword tables, PII patterns, scoring weights and decision thresholds for
the guardrails engine. All sections are frozen so a configuration can be
shared between concurrent checks and swapped out wholesale in tests.
"""
import json
import os
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, Optional, Tuple

import yaml

from ..utils.exceptions import ConfigurationError


DEFAULT_HIGH_RISK_KEYWORDS = (
    "ignore previous instructions",
    "disregard",
    "forget all previous",
    "new instructions",
    "system:",
    "admin mode",
    "developer mode",
    "jailbreak",
    "bypass",
)

DEFAULT_MODERATE_RISK_KEYWORDS = (
    "confidential",
    "secret",
    "password",
    "token",
    "api key",
    "private key",
)

# Whitespace including the Unicode spaces (no-break, thin, ideographic...) that
# ASCII-mode \s leaves out.
SEPARATOR_SPACES = r"\s\u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"

# Order matters: redaction is applied category by category in this order.
DEFAULT_PII_PATTERNS = (
    ("email", r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),
    ("ssn", r"\b\d{3}-\d{2}-\d{4}\b"),
    ("credit_card",
     r"\b\d{4}[{s}-]?\d{4}[{s}-]?\d{4}[{s}-]?\d{4}\b".replace("{s}", SEPARATOR_SPACES)),
    ("phone",
     r"\b(\+\d{1,2}[{s}]?)?((\(\d{3}\)|\d{3})[{s}.-]?\d{3}[{s}.-]?\d{4}|\d{3}-\d{4})\b"
     .replace("{s}", SEPARATOR_SPACES)),
    ("ip_address", r"\b(?:\d{1,3}\.){3}\d{1,3}\b"),
)

DEFAULT_HARMFUL_PATTERNS = (
    r"\b(password|secret|token|api[_\s]key)\s*[:=]",
    r"\b(kill|harm|hurt|attack)\b",
)

# name -> (trigger substrings, score when triggered)
DEFAULT_MODERATION_KEYWORDS = (
    ("hate", ("hate",), 0.8),
    ("harassment", ("harass",), 0.7),
    ("violence", ("violen", "kill"), 0.6),
    ("sexual", ("sexual", "explicit"), 0.5),
    ("self_harm", ("suicide", "self-harm"), 0.9),
)


@dataclass(frozen=True)
class PromptShieldConfig:
    """Prompt injection keyword tables and structural heuristics"""
    high_risk_keywords: Tuple[str, ...] = DEFAULT_HIGH_RISK_KEYWORDS
    moderate_risk_keywords: Tuple[str, ...] = DEFAULT_MODERATE_RISK_KEYWORDS
    injection_trigger: str = "ignore"
    injection_targets: Tuple[str, ...] = ("instructions", "prompts")
    code_block_markers: Tuple[str, ...] = ("```", "---")


@dataclass(frozen=True)
class PIIDetectionConfig:
    """PII pattern table and placeholder format"""
    patterns: Tuple[Tuple[str, str], ...] = DEFAULT_PII_PATTERNS
    placeholder_template: str = "[REDACTED_{category}]"


@dataclass(frozen=True)
class RiskScoringConfig:
    """Additive weights for prompt and response risk scoring"""
    max_score: float = 10.0

    # Prompt side
    prompt_injection_weight: float = 8.0
    injection_attempt_weight: float = 4.0
    blocked_weight: float = 4.0
    sensitive_keyword_weight: float = 0.5
    long_prompt_threshold: int = 10000
    long_prompt_weight: float = 1.0

    # Response side
    response_pii_weight: float = 2.0
    discrimination_marker: str = "discriminat"
    discrimination_weight: float = 3.0
    harmful_patterns: Tuple[str, ...] = DEFAULT_HARMFUL_PATTERNS
    harmful_pattern_weight: float = 1.0


@dataclass(frozen=True)
class ActionThresholds:
    """Severity buckets and action decision thresholds"""
    severity_critical: float = 8.0
    severity_high: float = 6.0
    severity_medium: float = 4.0

    hard_block: float = 10.0
    block: float = 8.0
    human_review_floor: float = 8.5
    elevated_block: float = 7.0
    flag: float = 5.0


@dataclass(frozen=True)
class ModerationConfig:
    """Keyword heuristics for auxiliary moderation flags"""
    keyword_flags: Tuple[Tuple[str, Tuple[str, ...], float], ...] = DEFAULT_MODERATION_KEYWORDS
    pii_score: float = 0.8
    baseline_score: float = 0.1


@dataclass(frozen=True)
class GuardrailsConfig:
    """Master guardrails configuration"""
    prompt_shield: PromptShieldConfig = field(default_factory=PromptShieldConfig)
    pii_detection: PIIDetectionConfig = field(default_factory=PIIDetectionConfig)
    risk_scoring: RiskScoringConfig = field(default_factory=RiskScoringConfig)
    thresholds: ActionThresholds = field(default_factory=ActionThresholds)
    moderation: ModerationConfig = field(default_factory=ModerationConfig)
    guardrail_type: str = "comprehensive"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GuardrailsConfig':
        """Build configuration from a (partial) nested dictionary"""
        sections = {
            "prompt_shield": PromptShieldConfig,
            "pii_detection": PIIDetectionConfig,
            "risk_scoring": RiskScoringConfig,
            "thresholds": ActionThresholds,
            "moderation": ModerationConfig,
        }
        unknown = set(data) - set(sections) - {"guardrail_type"}
        if unknown:
            raise ConfigurationError(f"Unknown guardrails config sections: {sorted(unknown)}")

        kwargs: Dict[str, Any] = {}
        for name, section_cls in sections.items():
            if name in data and data[name] is not None:
                kwargs[name] = _build_section(section_cls, data[name])
        if "guardrail_type" in data:
            kwargs["guardrail_type"] = str(data["guardrail_type"])
        return cls(**kwargs)

    @classmethod
    def from_file(cls, config_path: str) -> 'GuardrailsConfig':
        """Load configuration from YAML or JSON file"""
        try:
            with open(config_path, 'r', encoding="utf-8") as f:
                if config_path.endswith('.yaml') or config_path.endswith('.yml'):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read guardrails config {config_path}: {e}") from e

        return cls.from_dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain, serializable dictionary"""
        return _to_plain(asdict(self))

    def save_to_file(self, config_path: str):
        """Save configuration to file"""
        data = self.to_dict()
        with open(config_path, 'w', encoding="utf-8") as f:
            if config_path.endswith('.yaml') or config_path.endswith('.yml'):
                yaml.safe_dump(data, f, default_flow_style=False)
            else:
                json.dump(data, f, indent=2)


def _build_section(section_cls, values: Dict[str, Any]):
    if not isinstance(values, dict):
        raise ConfigurationError(f"Section {section_cls.__name__} must be a mapping")

    known = {f.name for f in fields(section_cls)}
    unknown = set(values) - known
    if unknown:
        raise ConfigurationError(f"Unknown keys for {section_cls.__name__}: {sorted(unknown)}")

    return section_cls(**{key: _freeze(value) for key, value in values.items()})


def _freeze(value: Any) -> Any:
    """Turn nested lists (from YAML/JSON) into tuples"""
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _to_plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


def load_guardrails_config(config_path: Optional[str] = None) -> GuardrailsConfig:
    """Load configuration from file, falling back to built-in defaults"""
    if config_path:
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Guardrails config not found: {config_path}")
        return GuardrailsConfig.from_file(config_path)
    return GuardrailsConfig()
