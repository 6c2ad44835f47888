"""Entry point: ``python -m umbrella_search`` back-fills message search fields."""

from __future__ import annotations

import asyncio

import structlog

from .config import Settings
from .es import ElasticsearchMessageStore, ESClient
from .logging import setup_logging
from .migration import SearchFieldsMigration

logger = structlog.get_logger()


async def run_migration(settings: Settings) -> None:
    async with ESClient(settings) as es:
        store = ElasticsearchMessageStore.from_settings(es.client, settings)
        migration = SearchFieldsMigration(store, settings.effective_migration())
        result = await migration.run()
    logger.info(
        "migration_exit",
        state=result.state.value,
        processed=result.processed,
        skipped=result.skipped,
    )


def main() -> None:
    settings = Settings()
    setup_logging(json=settings.log_json, level=settings.log_level, component="migration")
    asyncio.run(run_migration(settings))


if __name__ == "__main__":
    main()
