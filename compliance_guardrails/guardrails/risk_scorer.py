"""
Risk Scoring

Combines prompt shield factors, PII findings and text heuristics into
bounded 0-10 risk scores for prompts and model responses.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

from ..config.guardrails_config import RiskScoringConfig
from .patterns import compile_patterns
from .pii_detector import PIIDetectionResult, PIIDetector
from .prompt_shield import PromptShieldResult

CONTAINS_PII = "contains_pii"
CONTAINS_CODE = "contains_code"
POTENTIALLY_HARMFUL = "potentially_harmful"
CODE_FENCE = "```"


class PromptRiskScorer:
    """Additive prompt risk score, clamped to ``max_score``"""

    def __init__(self, config: Optional[RiskScoringConfig] = None):
        self.config = config or RiskScoringConfig()

    def score(self, prompt: str, shield_result: PromptShieldResult) -> float:
        cfg = self.config
        score = 0.0

        if shield_result.has_prompt_injection:
            score += cfg.prompt_injection_weight

        score += shield_result.injection_attempts * cfg.injection_attempt_weight

        if shield_result.blocked:
            score += cfg.blocked_weight

        score += shield_result.sensitive_mentions * cfg.sensitive_keyword_weight

        # Very long prompts are a common carrier for smuggled instructions
        if len(prompt) > cfg.long_prompt_threshold:
            score += cfg.long_prompt_weight

        return min(score, cfg.max_score)


@dataclass(frozen=True)
class ResponseAnalysis:
    """Risk assessment of a model response"""
    risk_score: float
    sanitized_response: Optional[str]
    content_categories: List[str] = field(default_factory=list)
    pii_result: PIIDetectionResult = field(
        default_factory=lambda: PIIDetectionResult(detected=False)
    )

    @classmethod
    def empty(cls, response: Optional[str] = None) -> 'ResponseAnalysis':
        return cls(risk_score=0.0, sanitized_response=response)


class ResponseAnalyzer:
    """Scores model output for PII leakage and harmful content"""

    def __init__(self,
                 config: Optional[RiskScoringConfig] = None,
                 pii_detector: Optional[PIIDetector] = None):
        self.config = config or RiskScoringConfig()
        self.pii_detector = pii_detector or PIIDetector()
        self.harmful_patterns = compile_patterns(self.config.harmful_patterns, re.IGNORECASE)

    def analyze(self, response: Optional[str]) -> ResponseAnalysis:
        if not response:
            return ResponseAnalysis.empty(response)

        cfg = self.config
        risk_score = 0.0
        categories: List[str] = []

        pii_result = self.pii_detector.detect_pii(response)
        if pii_result.detected:
            risk_score += cfg.response_pii_weight
            _add_category(categories, CONTAINS_PII)

        # Code blocks are tagged for reviewers; they carry no score on their own
        if CODE_FENCE in response:
            _add_category(categories, CONTAINS_CODE)

        if cfg.discrimination_marker in response.lower():
            risk_score += cfg.discrimination_weight
            _add_category(categories, POTENTIALLY_HARMFUL)

        for pattern in self.harmful_patterns:
            if pattern.search(response):
                risk_score += cfg.harmful_pattern_weight
                _add_category(categories, POTENTIALLY_HARMFUL)

        return ResponseAnalysis(
            risk_score=min(risk_score, cfg.max_score),
            sanitized_response=pii_result.sanitized,
            content_categories=categories,
            pii_result=pii_result
        )


def _add_category(categories: List[str], category: str) -> None:
    if category not in categories:
        categories.append(category)
