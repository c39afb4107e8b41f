#!/usr/bin/env python3
"""Database initialization script for the guardrail log store."""

import asyncio
import sys

from loguru import logger

from compliance_guardrails.config.settings import get_settings
from compliance_guardrails.storage.sql_store import SQLGuardrailLogStore
from compliance_guardrails.utils.logging import setup_logging


async def create_tables():
    """Create the guardrail log tables."""
    settings = get_settings()
    setup_logging(settings)

    store = SQLGuardrailLogStore.from_url(settings.database_url, echo=settings.database_echo)
    try:
        await store.create_tables()
        logger.info("Guardrail log tables created successfully")
    except Exception as e:
        logger.error(f"Failed to create guardrail log tables: {e}")
        raise
    finally:
        await store.close()


async def main():
    """Main initialization function."""
    print("Initializing guardrail log database...")

    try:
        await create_tables()
        print("Database initialization completed successfully!")

    except Exception as e:
        print(f"Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
