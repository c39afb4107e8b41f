"""
Pytest configuration and fixtures for the guardrails test suite.
"""
import os
import tempfile

import pytest
import pytest_asyncio

from compliance_guardrails.config.guardrails_config import GuardrailsConfig
from compliance_guardrails.guardrails.guardrails_orchestrator import GuardrailsEngine
from compliance_guardrails.guardrails.models import GuardrailContext
from compliance_guardrails.storage.file_store import FileGuardrailLogStore
from compliance_guardrails.storage.sql_store import SQLGuardrailLogStore


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast, isolated unit tests")
    config.addinivalue_line("markers", "integration: tests that touch real storage backends")


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield tmp_dir


@pytest.fixture
def guardrails_config():
    """Default guardrails policy."""
    return GuardrailsConfig()


@pytest.fixture
def request_context():
    """Typical request context supplied by the calling route."""
    return GuardrailContext(
        request_id="req-0001",
        model_provider="openai",
        model_name="gpt-4",
        user_id="user-42",
        organization_id="org-acme",
        ip_address="203.0.113.7",
    )


@pytest.fixture
def file_store(temp_dir):
    """File-backed guardrail log store in a temp directory."""
    return FileGuardrailLogStore(os.path.join(temp_dir, "guardrail_logs"))


@pytest_asyncio.fixture
async def sql_store(temp_dir):
    """SQLite-backed guardrail log store with tables created."""
    db_path = os.path.join(temp_dir, "guardrails.db")
    store = SQLGuardrailLogStore.from_url(f"sqlite+aiosqlite:///{db_path}")
    await store.create_tables()
    yield store
    await store.close()


@pytest.fixture
def engine(file_store, guardrails_config):
    """Guardrails engine backed by the file store."""
    return GuardrailsEngine(store=file_store, config=guardrails_config)
