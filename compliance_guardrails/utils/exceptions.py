"""Custom exceptions for the guardrails engine."""


class GuardrailsException(Exception):
    """Base exception for the guardrails engine."""
    pass


class ConfigurationError(GuardrailsException):
    """Raised when there's a configuration issue."""
    pass


class ContextError(GuardrailsException):
    """Raised when the caller-supplied request context is invalid."""
    pass


class AnalysisError(GuardrailsException):
    """Raised when matching, scoring or arbitration fails unexpectedly."""
    pass


class PersistenceError(GuardrailsException):
    """Raised when a guardrail log record cannot be stored or updated."""
    pass


class ReviewError(GuardrailsException):
    """Raised when a human review decision is rejected."""
    pass


class LogNotFoundError(ReviewError):
    """Raised when a review targets a log record that does not exist."""

    def __init__(self, log_id: str):
        super().__init__(f"Guardrail log not found: {log_id}")
        self.log_id = log_id
