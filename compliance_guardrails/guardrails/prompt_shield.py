"""
Prompt Shield

Scans inbound prompts for injection phrases, sensitive-keyword mentions and
markup that could smuggle instructions or scripts past the model.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from ..config.guardrails_config import PromptShieldConfig
from .patterns import contains_any, factor_name, find_keywords, has_angle_brackets, has_xss

INJECTION_ATTEMPT_PREFIX = "injection_attempt"
SENSITIVE_PREFIX = "sensitive"
PROMPT_INJECTION = "prompt_injection"
CODE_BLOCK_DETECTED = "code_block_detected"
POTENTIAL_XSS = "potential_xss"
HTML_TAGS_DETECTED = "html_tags_detected"


@dataclass(frozen=True)
class PromptShieldResult:
    """Named risk factors found in a prompt"""
    blocked: bool
    risk_factors: List[str] = field(default_factory=list)

    def count(self, prefix: str) -> int:
        return sum(1 for factor in self.risk_factors if factor.startswith(prefix))

    @property
    def injection_attempts(self) -> int:
        return self.count(INJECTION_ATTEMPT_PREFIX)

    @property
    def sensitive_mentions(self) -> int:
        return self.count(SENSITIVE_PREFIX + "_")

    @property
    def has_prompt_injection(self) -> bool:
        return PROMPT_INJECTION in self.risk_factors


class PromptShield:
    """Keyword and heuristic prompt-injection detector"""

    def __init__(self, config: Optional[PromptShieldConfig] = None):
        self.config = config or PromptShieldConfig()

    def scan(self, prompt: str) -> PromptShieldResult:
        risk_factors: List[str] = []
        lowered = prompt.lower()

        for keyword in find_keywords(lowered, self.config.high_risk_keywords):
            risk_factors.append(factor_name(INJECTION_ATTEMPT_PREFIX, keyword))

        # Paraphrased attempts ("ignore all prior instructions") miss the exact keyword list
        if self.config.injection_trigger in lowered and contains_any(lowered, self.config.injection_targets):
            risk_factors.append(PROMPT_INJECTION)

        for keyword in find_keywords(lowered, self.config.moderate_risk_keywords):
            risk_factors.append(factor_name(SENSITIVE_PREFIX, keyword))

        if contains_any(prompt, self.config.code_block_markers):
            risk_factors.append(CODE_BLOCK_DETECTED)

        if has_xss(prompt):
            risk_factors.append(POTENTIAL_XSS)
        elif has_angle_brackets(prompt):
            risk_factors.append(HTML_TAGS_DETECTED)

        blocked = any(factor.startswith(INJECTION_ATTEMPT_PREFIX) for factor in risk_factors)
        if blocked:
            logger.debug(f"Prompt shield raised {len(risk_factors)} risk factors")

        return PromptShieldResult(blocked=blocked, risk_factors=risk_factors)
