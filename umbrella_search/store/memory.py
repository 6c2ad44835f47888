"""In-process MessageStore used by the test suite and local runs."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

from ..predicates import Predicate
from .base import MessageStore, SortOrder


class InMemoryStore(MessageStore):
    """Dict-backed store that evaluates predicates with ``Predicate.matches``."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[Any, dict[str, Any]]] = {}

    def insert(self, collection: str, *docs: dict[str, Any]) -> None:
        docs_by_id = self._collections.setdefault(collection, {})
        for doc in docs:
            docs_by_id[doc["id"]] = copy.deepcopy(doc)

    def _docs(self, collection: str) -> list[dict[str, Any]]:
        return list(self._collections.get(collection, {}).values())

    async def get(self, collection: str, doc_id: Any) -> dict[str, Any] | None:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def count(self, collection: str, filter: Predicate | None = None) -> int:
        return sum(1 for doc in self._docs(collection) if filter is None or filter.matches(doc))

    async def find(
        self,
        collection: str,
        filter: Predicate | None = None,
        *,
        sort: SortOrder | None = None,
        limit: int | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        docs = [doc for doc in self._docs(collection) if filter is None or filter.matches(doc)]
        if sort is not None:
            docs.sort(key=lambda doc: doc["id"], reverse=sort == "desc")
        if limit is not None:
            docs = docs[:limit]
        if fields is not None:
            keep = {"id", *fields}
            docs = [{k: v for k, v in doc.items() if k in keep} for doc in docs]
        return copy.deepcopy(docs)

    async def bulk_update(
        self,
        collection: str,
        updates: Sequence[tuple[Any, dict[str, Any]]],
    ) -> int:
        docs_by_id = self._collections.get(collection, {})
        modified = 0
        for doc_id, fields in updates:
            doc = docs_by_id.get(doc_id)
            if doc is None:
                continue
            changed = any(doc.get(k) != v for k, v in fields.items())
            doc.update(copy.deepcopy(fields))
            modified += int(changed)
        return modified
