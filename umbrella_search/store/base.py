"""The document-store capability the search layer depends on."""

from __future__ import annotations

import abc
from collections.abc import Sequence
from typing import Any, Literal

from ..models import IdentityRecord
from ..predicates import Predicate

USERS = "users"
MAILBOXES = "mailboxes"
MESSAGES = "messages"

SortOrder = Literal["asc", "desc"]


class MessageStore(abc.ABC):
    """Abstract document store holding users, mailboxes and messages.

    Documents are plain dicts keyed by an ``id`` field that sorts in insertion
    order.  Filters are :mod:`umbrella_search.predicates` trees; ``None``
    matches every document.  Implementations raise
    :class:`~umbrella_search.errors.StoreError` on storage failure.
    """

    @abc.abstractmethod
    async def get(self, collection: str, doc_id: Any) -> dict[str, Any] | None:
        """Return the document with *doc_id*, or ``None`` if it does not exist."""

    @abc.abstractmethod
    async def count(self, collection: str, filter: Predicate | None = None) -> int:
        """Count documents matching *filter*."""

    @abc.abstractmethod
    async def find(
        self,
        collection: str,
        filter: Predicate | None = None,
        *,
        sort: SortOrder | None = None,
        limit: int | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Return documents matching *filter*.

        ``sort`` orders by ``id``.  ``fields`` restricts the returned keys
        (``id`` is always included).
        """

    @abc.abstractmethod
    async def bulk_update(
        self,
        collection: str,
        updates: Sequence[tuple[Any, dict[str, Any]]],
    ) -> int:
        """Set fields on many documents at once, without ordering guarantees.

        Each update is ``(doc_id, fields)``.  A failure on one document does not
        stop the others; updates already applied stay applied.  Returns the
        number of documents modified.
        """

    # ------------------------------------------------------------------
    # Helpers built on the primitives
    # ------------------------------------------------------------------

    async def get_user(self, user_id: str) -> IdentityRecord | None:
        doc = await self.get(USERS, user_id)
        if doc is None:
            return None
        return IdentityRecord.model_validate(doc)

    async def max_id(self, collection: str) -> Any | None:
        """Highest ``id`` currently in *collection*, or ``None`` when empty."""
        docs = await self.find(collection, sort="desc", limit=1, fields=["id"])
        return docs[0]["id"] if docs else None
