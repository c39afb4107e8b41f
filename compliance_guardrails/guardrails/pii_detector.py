"""
PII Detection and Redaction

Detects personally identifiable information in prompts and model responses
and replaces every match with a type-tagged placeholder before the text is
forwarded or stored.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Tuple

from ..config.guardrails_config import PIIDetectionConfig
from .patterns import compile_table


@dataclass(frozen=True)
class PIIDetectionResult:
    """Result of PII detection scan"""
    detected: bool
    types: List[str] = field(default_factory=list)
    sanitized: str = ""
    match_counts: Dict[str, int] = field(default_factory=dict)


class PIIDetector:
    """Detects PII categories with an ordered pattern table"""

    def __init__(self, config: Optional[PIIDetectionConfig] = None):
        self.config = config or PIIDetectionConfig()

        # ASCII semantics so \b and \d behave the same for every input script
        self.compiled_patterns: Tuple[Tuple[str, Pattern], ...] = compile_table(
            self.config.patterns, re.ASCII
        )

    def placeholder(self, category: str) -> str:
        return self.config.placeholder_template.format(category=category.upper())

    def detect_pii(self, text: str) -> PIIDetectionResult:
        """Detect PII in the given text and return a redacted copy"""
        detected_types: List[str] = []
        match_counts: Dict[str, int] = {}
        sanitized = text

        for category, pattern in self.compiled_patterns:
            # Detection runs on the original text; replacement on the running copy
            if not pattern.search(text):
                continue
            detected_types.append(category)
            token = self.placeholder(category)
            sanitized, replaced = pattern.subn(lambda _match: token, sanitized)
            match_counts[category] = replaced

        return PIIDetectionResult(
            detected=bool(detected_types),
            types=detected_types,
            sanitized=sanitized,
            match_counts=match_counts
        )

    def redact_pii(self, text: str) -> str:
        """Return ``text`` with every detected PII category redacted"""
        return self.detect_pii(text).sanitized

    def contains_pii(self, text: str) -> bool:
        return any(pattern.search(text) for _, pattern in self.compiled_patterns)
