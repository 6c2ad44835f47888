"""Async Elasticsearch client wrapper."""

from __future__ import annotations

from elasticsearch import AsyncElasticsearch

from umbrella_search.config import Settings


class ESClient:
    """Owns one ``AsyncElasticsearch`` connection pool built from settings.

    Usable as an async context manager so short-lived processes (the
    migration entry point) close the pool on exit.
    """

    def __init__(self, settings: Settings) -> None:
        self._client = AsyncElasticsearch(
            hosts=[settings.elasticsearch_url],
            request_timeout=settings.request_timeout,
        )

    @property
    def client(self) -> AsyncElasticsearch:
        return self._client

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> ESClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
