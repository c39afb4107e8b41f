"""
Guardrail data model: request context, check results and persisted log records.
"""
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union
import uuid

from ..utils.exceptions import ContextError


class GuardrailAction(str, Enum):
    """Terminal action decided for a check"""
    ALLOWED = "allowed"
    BLOCKED = "blocked"
    REDACTED = "redacted"
    FLAGGED = "flagged"
    HUMAN_REVIEW_REQUIRED = "human_review_required"

    @property
    def permits_request(self) -> bool:
        return self in (GuardrailAction.ALLOWED, GuardrailAction.REDACTED, GuardrailAction.FLAGGED)


class Severity(str, Enum):
    """Severity bucket derived from the highest risk score"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReviewDecision(str, Enum):
    """Human reviewer decision about a past automated check"""
    APPROVED = "approved"
    REJECTED = "rejected"
    MODIFIED = "modified"


# camelCase keys accepted from callers that still send the upstream route payload
_CONTEXT_ALIASES = {
    "requestId": "request_id",
    "userId": "user_id",
    "organizationId": "organization_id",
    "modelProvider": "model_provider",
    "modelName": "model_name",
    "ipAddress": "ip_address",
}


@dataclass(frozen=True)
class GuardrailContext:
    """Caller-supplied request context; validated by the engine, not here"""
    request_id: Optional[str]
    model_provider: str
    model_name: str
    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    ip_address: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'GuardrailContext':
        normalized = {_CONTEXT_ALIASES.get(key, key): value for key, value in data.items()}
        return cls(
            request_id=normalized.get("request_id"),
            model_provider=normalized.get("model_provider") or "",
            model_name=normalized.get("model_name") or "",
            user_id=normalized.get("user_id"),
            organization_id=normalized.get("organization_id"),
            ip_address=normalized.get("ip_address"),
        )

    @classmethod
    def coerce(cls, context: Union['GuardrailContext', Mapping[str, Any], None]) -> 'GuardrailContext':
        if isinstance(context, cls):
            return context
        if context is None:
            return cls.from_mapping({})
        if not isinstance(context, Mapping):
            raise ContextError(f"context must be a mapping, got {type(context).__name__}")
        return cls.from_mapping(context)


@dataclass(frozen=True)
class ModerationFlags:
    """Auxiliary per-category probabilities for downstream reporting"""
    hate: float
    harassment: float
    violence: float
    sexual: float
    self_harm: float
    pii: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class GuardrailCheckResult:
    """Outcome of one guardrails check"""
    allowed: bool
    action: GuardrailAction
    severity: Severity
    sanitized_prompt: Optional[str]
    sanitized_response: Optional[str]
    pii_detected: bool
    pii_types: List[str]
    prompt_risk_score: float
    response_risk_score: float
    requires_human_review: bool
    content_categories: List[str]
    moderation_flags: Optional[ModerationFlags] = None
    log_id: Optional[str] = None

    @classmethod
    def fail_secure(cls) -> 'GuardrailCheckResult':
        """Most restrictive result, returned when the check itself fails"""
        return cls(
            allowed=False,
            action=GuardrailAction.BLOCKED,
            severity=Severity.CRITICAL,
            sanitized_prompt=None,
            sanitized_response=None,
            pii_detected=False,
            pii_types=[],
            prompt_risk_score=10.0,
            response_risk_score=0.0,
            requires_human_review=True,
            content_categories=[],
        )

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["action"] = self.action.value
        result["severity"] = self.severity.value
        return result


@dataclass
class GuardrailLogRecord:
    """Persisted audit record of a check; holds sanitized text only"""
    request_id: str
    action: GuardrailAction
    severity: Severity
    sanitized_prompt: str
    prompt_risk_score: float
    response_risk_score: float
    model_provider: str
    model_name: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    organization_id: Optional[str] = None
    user_id: Optional[str] = None
    guardrail_type: str = "comprehensive"
    sanitized_response: Optional[str] = None
    pii_detected: bool = False
    pii_types: List[str] = field(default_factory=list)
    pii_redacted: bool = False
    content_categories: List[str] = field(default_factory=list)
    moderation_flags: Dict[str, float] = field(default_factory=dict)
    requires_human_review: bool = False
    human_reviewed_at: Optional[datetime] = None
    human_reviewed_by: Optional[str] = None
    human_review_decision: Optional[ReviewDecision] = None
    human_review_notes: Optional[str] = None
    processing_time_ms: Optional[int] = None
    ip_address: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_reviewed(self) -> bool:
        return self.human_review_decision is not None

    def with_review(self,
                    reviewed_by: str,
                    decision: ReviewDecision,
                    notes: Optional[str],
                    reviewed_at: datetime) -> 'GuardrailLogRecord':
        return replace(
            self,
            human_reviewed_by=reviewed_by,
            human_review_decision=decision,
            human_review_notes=notes,
            human_reviewed_at=reviewed_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary for serialization"""
        record = asdict(self)
        record["action"] = self.action.value
        record["severity"] = self.severity.value
        record["human_review_decision"] = (
            self.human_review_decision.value if self.human_review_decision else None
        )
        record["created_at"] = self.created_at.isoformat()
        record["human_reviewed_at"] = (
            self.human_reviewed_at.isoformat() if self.human_reviewed_at else None
        )
        return record

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GuardrailLogRecord':
        """Create record from dictionary"""
        data = dict(data)
        data["action"] = GuardrailAction(data["action"])
        data["severity"] = Severity(data["severity"])
        if data.get("human_review_decision"):
            data["human_review_decision"] = ReviewDecision(data["human_review_decision"])
        if isinstance(data.get("created_at"), str):
            data["created_at"] = datetime.fromisoformat(data["created_at"])
        if isinstance(data.get("human_reviewed_at"), str):
            data["human_reviewed_at"] = datetime.fromisoformat(data["human_reviewed_at"])
        return cls(**data)
