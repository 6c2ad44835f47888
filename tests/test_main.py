"""Tests for the migration entry point."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from umbrella_search.__main__ import run_migration
from umbrella_search.config import MigrationConfig, Settings
from umbrella_search.store import MESSAGES


def _es_client_mock():
    es = MagicMock()
    es.__aenter__ = AsyncMock(return_value=es)
    es.__aexit__ = AsyncMock(return_value=None)
    return es


@pytest.mark.asyncio
async def test_run_migration_uses_configured_store(messages_store):
    settings = Settings(environment="production", migration=MigrationConfig(enabled=True))
    es = _es_client_mock()

    with (
        patch("umbrella_search.__main__.ESClient", return_value=es),
        patch("umbrella_search.__main__.ElasticsearchMessageStore.from_settings", return_value=messages_store),
    ):
        await run_migration(settings)

    assert await messages_store.count(MESSAGES) == 5
    assert all("search" in doc for doc in await messages_store.find(MESSAGES))
    es.__aexit__.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_migration_disabled_in_test_environment(messages_store):
    settings = Settings(environment="test", migration=MigrationConfig(enabled=True))

    with (
        patch("umbrella_search.__main__.ESClient", return_value=_es_client_mock()),
        patch("umbrella_search.__main__.ElasticsearchMessageStore.from_settings", return_value=messages_store),
    ):
        await run_migration(settings)

    assert not any("search" in doc for doc in await messages_store.find(MESSAGES))
