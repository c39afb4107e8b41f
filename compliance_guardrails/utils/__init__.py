"""
Utility functions and helpers.
"""

from .exceptions import (
    AnalysisError,
    ConfigurationError,
    ContextError,
    GuardrailsException,
    LogNotFoundError,
    PersistenceError,
    ReviewError,
)
from .logging import log_operation, setup_logging

__all__ = [
    "AnalysisError",
    "ConfigurationError",
    "ContextError",
    "GuardrailsException",
    "LogNotFoundError",
    "PersistenceError",
    "ReviewError",
    "log_operation",
    "setup_logging"
]
