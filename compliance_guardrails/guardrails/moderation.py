"""
Moderation flag estimator.

Keyword heuristics that attach per-category scores to each check for
downstream reporting. The flags never feed into the action decision.
"""
import re
from typing import Optional

from ..config.guardrails_config import DEFAULT_PII_PATTERNS, ModerationConfig
from ..utils.exceptions import ConfigurationError
from .models import ModerationFlags

_EMAIL_PATTERN = re.compile(dict(DEFAULT_PII_PATTERNS)["email"], re.ASCII)
KEYWORD_CATEGORIES = ("hate", "harassment", "violence", "sexual", "self_harm")


class ModerationEstimator:

    def __init__(self, config: Optional[ModerationConfig] = None):
        self.config = config or ModerationConfig()

        unknown = {name for name, _, _ in self.config.keyword_flags} - set(KEYWORD_CATEGORIES)
        if unknown:
            raise ConfigurationError(f"Unknown moderation categories: {sorted(unknown)}")

    def estimate(self, prompt: str, response: Optional[str]) -> ModerationFlags:
        combined = f"{prompt} {response or ''}".lower()
        baseline = self.config.baseline_score

        scores = {name: baseline for name in KEYWORD_CATEGORIES}
        for name, triggers, score in self.config.keyword_flags:
            if any(trigger in combined for trigger in triggers):
                scores[name] = score

        scores["pii"] = self.config.pii_score if _EMAIL_PATTERN.search(combined) else baseline
        return ModerationFlags(**scores)
