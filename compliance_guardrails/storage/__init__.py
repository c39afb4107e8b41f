"""
Guardrail log storage backends.
"""
from typing import Optional

from ..config.settings import Settings, StorageBackend, get_settings
from ..utils.exceptions import ConfigurationError
from .base import GuardrailLogStore, LogFilter
from .file_store import FileGuardrailLogStore
from .sql_store import GuardrailLogModel, SQLGuardrailLogStore


def create_log_store(settings: Optional[Settings] = None) -> GuardrailLogStore:
    """Build the store selected by ``settings.storage_backend``"""
    settings = settings or get_settings()

    if settings.storage_backend == StorageBackend.FILE:
        return FileGuardrailLogStore(settings.storage_path)
    if settings.storage_backend == StorageBackend.DATABASE:
        return SQLGuardrailLogStore.from_url(settings.database_url, echo=settings.database_echo)
    raise ConfigurationError(f"Unsupported storage backend: {settings.storage_backend}")


__all__ = [
    "GuardrailLogStore",
    "LogFilter",
    "FileGuardrailLogStore",
    "SQLGuardrailLogStore",
    "GuardrailLogModel",
    "create_log_store"
]
