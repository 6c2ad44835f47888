"""Mailbox scoping for searches that span all of a user's mailboxes.

A broad search must leave out the Junk and Trash special-use mailboxes.  That
can be expressed two ways:

* **include**: ``mailbox IN (every other mailbox)``;
* **exclude**: ``mailbox NOT IN (junk, trash)``.

Both select the same messages.  The inclusion list is planned well by the
store's query engine while it stays small, but past a couple of hundred entries
it stops using the indexes and the exclusion form becomes faster.  The resolver
therefore counts the eligible mailboxes first and picks a strategy by
cardinality.

A failed count probe is treated as an unknown count and falls back to the
exclusion strategy.  A failed exclusion listing has no fallback and is the
one listing failure raised, as :class:`~umbrella_search.errors.InternalLookupError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import structlog

from .config import Settings
from .errors import InternalLookupError, StoreError
from .models import EXCLUDED_SPECIAL_USE
from .predicates import Eq, MemberOf, NotMemberOf, Predicate, all_of
from .store import MAILBOXES, MessageStore

logger = structlog.get_logger()

INCLUSION_THRESHOLD = 200


class ScopeStrategy(str, Enum):
    EXPLICIT = "explicit"
    INCLUDE = "include"
    EXCLUDE = "exclude"


@dataclass(frozen=True)
class MailboxScope:
    """The set of mailboxes a search is restricted to."""

    strategy: ScopeStrategy
    mailbox_ids: tuple[str, ...]

    @classmethod
    def explicit(cls, mailbox_id: str) -> MailboxScope:
        return cls(ScopeStrategy.EXPLICIT, (mailbox_id,))

    def predicate(self, field: str = "mailbox") -> Predicate:
        if self.strategy is ScopeStrategy.EXPLICIT:
            return Eq(field, self.mailbox_ids[0])
        if self.strategy is ScopeStrategy.INCLUDE:
            return MemberOf(field, self.mailbox_ids)
        return NotMemberOf(field, self.mailbox_ids)


class MailboxScopeResolver:
    """Choose between inclusion and exclusion scoping for a user."""

    def __init__(self, store: MessageStore, *, threshold: int = INCLUSION_THRESHOLD) -> None:
        self._store = store
        self._threshold = threshold

    @classmethod
    def from_settings(cls, store: MessageStore, settings: Settings) -> MailboxScopeResolver:
        return cls(store, threshold=settings.scope_threshold)

    @property
    def threshold(self) -> int:
        return self._threshold

    async def resolve(self, user: str) -> MailboxScope:
        count = await self._count_eligible(user)

        if count and count < self._threshold:
            try:
                scope = await self._list(
                    ScopeStrategy.INCLUDE,
                    all_of(Eq("user", user), NotMemberOf("special_use", EXCLUDED_SPECIAL_USE)),
                )
            except StoreError:
                logger.warning("mailbox_inclusion_listing_failed", user=user, exc_info=True)
            else:
                logger.debug("mailbox_scope_resolved", user=user, strategy=scope.strategy.value, count=count)
                return scope

        try:
            scope = await self._list(
                ScopeStrategy.EXCLUDE,
                all_of(Eq("user", user), MemberOf("special_use", EXCLUDED_SPECIAL_USE)),
            )
        except StoreError as exc:
            raise InternalLookupError() from exc

        logger.debug("mailbox_scope_resolved", user=user, strategy=scope.strategy.value, count=count)
        return scope

    async def _count_eligible(self, user: str) -> int | None:
        """Number of non-Junk/Trash mailboxes, or ``None`` if the probe failed."""
        try:
            return await self._store.count(
                MAILBOXES,
                all_of(Eq("user", user), NotMemberOf("special_use", EXCLUDED_SPECIAL_USE)),
            )
        except StoreError:
            logger.warning("mailbox_count_probe_failed", user=user, exc_info=True)
            return None

    async def _list(self, strategy: ScopeStrategy, filter: Predicate) -> MailboxScope:
        mailboxes = await self._store.find(MAILBOXES, filter, fields=["id"])
        return MailboxScope(strategy, tuple(m["id"] for m in mailboxes))
