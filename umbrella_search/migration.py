"""Back-fill the denormalized ``search`` field on existing messages.

Messages stored before the search fields existed have no ``search`` key.  This
migration walks them in ``id`` order, derives the fields from the stored
envelope and writes them back in unordered bulk updates.

The upper ``id`` bound is captured once when the run starts; messages
delivered afterwards are out of scope for that run.  Eligibility is "no
``search`` field", so a run that was interrupted (or a second run) only picks
up messages that are still missing it.  The cursor lives in memory only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from .config import MigrationConfig
from .envelope import build_search_index
from .predicates import And, Exists, Predicate, Range
from .store import MESSAGES, MessageStore

logger = structlog.get_logger()

SEARCH_FIELD = "search"
PROJECTION = ["envelope", "subject"]


class MigrationState(str, Enum):
    SCANNING = "scanning"
    PROCESSING = "processing"
    DONE = "done"


@dataclass
class MigrationCursor:
    """In-memory progress of one run."""

    snapshot_max: Any = None
    total: int = 0
    last_id: Any = None
    processed: int = 0
    batches: int = 0


@dataclass
class MigrationResult:
    state: MigrationState
    cursor: MigrationCursor = field(default_factory=MigrationCursor)
    skipped: bool = False

    @property
    def processed(self) -> int:
        return self.cursor.processed

    @property
    def batches(self) -> int:
        return self.cursor.batches

    @property
    def total(self) -> int:
        return self.cursor.total


class SearchFieldsMigration:
    """Resumable, idempotent back-fill of ``search`` fields on messages.

    ``config.enabled`` is read once, from the config passed in; see
    :meth:`umbrella_search.config.Settings.effective_migration`.
    """

    def __init__(
        self,
        store: MessageStore,
        config: MigrationConfig,
        *,
        collection: str = MESSAGES,
    ) -> None:
        self._store = store
        self._config = config
        self._collection = collection
        self._state = MigrationState.SCANNING

    @property
    def state(self) -> MigrationState:
        return self._state

    def _eligible(self, cursor: MigrationCursor) -> Predicate:
        return And((
            Exists(SEARCH_FIELD, present=False),
            Range("id", gt=cursor.last_id, lte=cursor.snapshot_max),
        ))

    async def run(self) -> MigrationResult:
        """Run until every eligible message of the snapshot has been updated."""
        cursor = MigrationCursor()
        self._state = MigrationState.SCANNING

        if not self._config.enabled:
            logger.info("migration_disabled", migration="add_search_fields")
            return self._finish(cursor, skipped=True)

        logger.info("migration_started", migration="add_search_fields")

        cursor.snapshot_max = await self._store.max_id(self._collection)
        if cursor.snapshot_max is None:
            logger.info("migration_skipped", reason="no_documents")
            return self._finish(cursor, skipped=True)

        cursor.total = await self._store.count(self._collection, self._eligible(cursor))
        if cursor.total == 0:
            logger.info("migration_skipped", reason="nothing_to_migrate", snapshot_max=cursor.snapshot_max)
            return self._finish(cursor, skipped=True)

        logger.info(
            "migration_planned",
            total=cursor.total,
            snapshot_max=cursor.snapshot_max,
            batch_size=self._config.batch_size,
        )

        self._state = MigrationState.PROCESSING
        while await self._process_batch(cursor):
            if self._should_report(cursor):
                logger.info(
                    "migration_progress",
                    batch=cursor.batches,
                    processed=cursor.processed,
                    total=cursor.total,
                    percent=round(cursor.processed / cursor.total * 100, 1),
                )

        logger.info("migration_complete", processed=cursor.processed, batches=cursor.batches)
        return self._finish(cursor)

    async def _process_batch(self, cursor: MigrationCursor) -> bool:
        """Fetch, index and write one batch. Returns ``False`` once nothing is left."""
        batch = await self._store.find(
            self._collection,
            self._eligible(cursor),
            sort="asc",
            limit=self._config.batch_size,
            fields=PROJECTION,
        )
        if not batch:
            return False

        updates = []
        for doc in batch:
            index = build_search_index(doc.get("envelope"), doc.get("subject"))
            updates.append((doc["id"], {SEARCH_FIELD: index.to_document()}))

        cursor.processed += await self._store.bulk_update(self._collection, updates)
        cursor.batches += 1
        cursor.last_id = batch[-1]["id"]
        return True

    def _should_report(self, cursor: MigrationCursor) -> bool:
        return (
            cursor.total < self._config.progress_full_threshold
            or cursor.batches % self._config.progress_every == 0
        )

    def _finish(self, cursor: MigrationCursor, *, skipped: bool = False) -> MigrationResult:
        self._state = MigrationState.DONE
        return MigrationResult(state=self._state, cursor=cursor, skipped=skipped)
