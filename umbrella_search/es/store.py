"""MessageStore backed by Elasticsearch indices."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from elasticsearch import ApiError, AsyncElasticsearch, NotFoundError, TransportError
from elasticsearch.helpers import async_scan, async_streaming_bulk

from umbrella_search.config import Settings
from umbrella_search.errors import StoreError
from umbrella_search.predicates import Predicate
from umbrella_search.store.base import MAILBOXES, MESSAGES, USERS, MessageStore, SortOrder

from .mapping import MAILBOX_MAPPING, MESSAGE_MAPPING, USER_MAPPING
from .queries import build_message_search, to_es_query

logger = structlog.get_logger()

_MAPPINGS = {
    USERS: USER_MAPPING,
    MAILBOXES: MAILBOX_MAPPING,
    MESSAGES: MESSAGE_MAPPING,
}


class ElasticsearchMessageStore(MessageStore):
    """Users, mailboxes and messages stored as documents in three indices.

    Documents are indexed with ``_id`` equal to their ``id`` field, so
    ``get`` and bulk updates address them directly.
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        *,
        indices: dict[str, str] | None = None,
        refresh: bool = False,
    ) -> None:
        self._client = client
        self._indices = {USERS: USERS, MAILBOXES: MAILBOXES, MESSAGES: MESSAGES}
        self._indices.update(indices or {})
        self._refresh = refresh

    @classmethod
    def from_settings(cls, client: AsyncElasticsearch, settings: Settings) -> ElasticsearchMessageStore:
        return cls(
            client,
            indices={
                USERS: settings.users_index,
                MAILBOXES: settings.mailboxes_index,
                MESSAGES: settings.messages_index,
            },
        )

    def index_for(self, collection: str) -> str:
        try:
            return self._indices[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}") from None

    async def ensure_indices(self) -> None:
        """Create any missing index with its mapping."""
        for collection, mapping in _MAPPINGS.items():
            index = self.index_for(collection)
            try:
                if not await self._client.indices.exists(index=index):
                    await self._client.indices.create(index=index, mappings=mapping)
                    logger.info("es_index_created", index=index)
            except (ApiError, TransportError) as exc:
                raise StoreError(str(exc)) from exc

    # ------------------------------------------------------------------
    # MessageStore
    # ------------------------------------------------------------------

    async def get(self, collection: str, doc_id: Any) -> dict[str, Any] | None:
        try:
            resp = await self._client.get(index=self.index_for(collection), id=str(doc_id))
        except NotFoundError:
            return None
        except (ApiError, TransportError) as exc:
            raise StoreError(str(exc)) from exc
        return {"id": resp["_id"], **resp["_source"]}

    async def count(self, collection: str, filter: Predicate | None = None) -> int:
        try:
            resp = await self._client.count(
                index=self.index_for(collection),
                query=to_es_query(filter),
            )
        except (ApiError, TransportError) as exc:
            raise StoreError(str(exc)) from exc
        return int(resp["count"])

    async def find(
        self,
        collection: str,
        filter: Predicate | None = None,
        *,
        sort: SortOrder | None = None,
        limit: int | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        index = self.index_for(collection)
        source = ["id", *(f for f in fields if f != "id")] if fields is not None else True
        sort_clause = [{"id": {"order": sort}}] if sort else None

        try:
            if limit is None:
                body: dict = {"query": to_es_query(filter), "_source": source}
                if sort_clause:
                    body["sort"] = sort_clause
                hits = [
                    hit
                    async for hit in async_scan(
                        self._client,
                        index=index,
                        query=body,
                        preserve_order=bool(sort_clause),
                    )
                ]
            else:
                resp = await self._client.search(
                    index=index,
                    query=to_es_query(filter),
                    sort=sort_clause,
                    size=limit,
                    source=source,
                )
                hits = resp["hits"]["hits"]
        except (ApiError, TransportError) as exc:
            raise StoreError(str(exc)) from exc

        return [{"id": hit["_id"], **(hit.get("_source") or {})} for hit in hits]

    async def bulk_update(
        self,
        collection: str,
        updates: Sequence[tuple[Any, dict[str, Any]]],
    ) -> int:
        if not updates:
            return 0

        index = self.index_for(collection)
        actions = [
            {"_op_type": "update", "_index": index, "_id": str(doc_id), "doc": fields}
            for doc_id, fields in updates
        ]
        # "noop" results are acknowledged but not counted as modified.
        modified = noop = failed = 0
        try:
            async for ok, item in async_streaming_bulk(
                self._client,
                actions,
                raise_on_error=False,
                refresh=self._refresh,
            ):
                if not ok:
                    failed += 1
                elif item.get("update", {}).get("result") == "updated":
                    modified += 1
                else:
                    noop += 1
        except (ApiError, TransportError) as exc:
            raise StoreError(str(exc)) from exc

        if failed:
            logger.warning(
                "bulk_update_partial_failure",
                index=index,
                failed=failed,
                modified=modified,
                noop=noop,
            )
        return modified

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search_messages(
        self,
        filter: Predicate,
        *,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        """Run a compiled filter against the messages index.

        Returns ``(documents, total)``.
        """
        body = build_message_search(filter, offset=offset, limit=limit)
        try:
            resp = await self._client.search(index=self.index_for(MESSAGES), body=body)
        except (ApiError, TransportError) as exc:
            raise StoreError(str(exc)) from exc

        hits = resp["hits"]
        docs = [{"id": hit["_id"], **hit["_source"]} for hit in hits["hits"]]
        return docs, int(hits["total"]["value"])
