"""Tests for umbrella_search.scope."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from umbrella_search.config import Settings
from umbrella_search.errors import InternalLookupError, StoreError
from umbrella_search.models import JUNK, TRASH
from umbrella_search.predicates import Eq, MemberOf, NotMemberOf
from umbrella_search.scope import MailboxScope, MailboxScopeResolver, ScopeStrategy
from umbrella_search.store import MAILBOXES, MESSAGES, InMemoryStore

from tests.conftest import USER_ID, message


def store_with_mailboxes(count: int) -> InMemoryStore:
    store = InMemoryStore()
    store.insert(
        MAILBOXES,
        *[{"id": f"mb{i:04d}", "user": USER_ID, "path": f"Folder {i}"} for i in range(count)],
        {"id": "junk", "user": USER_ID, "path": "Junk", "special_use": JUNK},
        {"id": "trash", "user": USER_ID, "path": "Trash", "special_use": TRASH},
    )
    return store


class TestMailboxScope:
    def test_explicit_predicate(self):
        assert MailboxScope.explicit("inbox").predicate() == Eq("mailbox", "inbox")

    def test_include_predicate(self):
        scope = MailboxScope(ScopeStrategy.INCLUDE, ("a", "b"))
        assert scope.predicate() == MemberOf("mailbox", ("a", "b"))

    def test_exclude_predicate(self):
        scope = MailboxScope(ScopeStrategy.EXCLUDE, ("junk",))
        assert scope.predicate() == NotMemberOf("mailbox", ("junk",))


class TestStrategySelection:
    @pytest.mark.asyncio
    async def test_small_mailbox_count_uses_inclusion(self):
        store = store_with_mailboxes(150)
        scope = await MailboxScopeResolver(store).resolve(USER_ID)
        assert scope.strategy is ScopeStrategy.INCLUDE
        assert len(scope.mailbox_ids) == 150
        assert "junk" not in scope.mailbox_ids

    @pytest.mark.asyncio
    async def test_large_mailbox_count_uses_exclusion(self):
        store = store_with_mailboxes(250)
        scope = await MailboxScopeResolver(store).resolve(USER_ID)
        assert scope.strategy is ScopeStrategy.EXCLUDE
        assert scope.mailbox_ids == ("junk", "trash")

    @pytest.mark.asyncio
    async def test_threshold_is_exclusive(self):
        store = store_with_mailboxes(200)
        scope = await MailboxScopeResolver(store).resolve(USER_ID)
        assert scope.strategy is ScopeStrategy.EXCLUDE

    @pytest.mark.asyncio
    async def test_no_eligible_mailboxes_uses_exclusion(self):
        store = store_with_mailboxes(0)
        scope = await MailboxScopeResolver(store).resolve(USER_ID)
        assert scope.strategy is ScopeStrategy.EXCLUDE

    @pytest.mark.asyncio
    async def test_failed_count_probe_uses_exclusion(self):
        store = store_with_mailboxes(3)
        store.count = AsyncMock(side_effect=StoreError("shard unavailable"))
        scope = await MailboxScopeResolver(store).resolve(USER_ID)
        assert scope.strategy is ScopeStrategy.EXCLUDE
        assert scope.mailbox_ids == ("junk", "trash")

    @pytest.mark.asyncio
    async def test_failed_inclusion_listing_uses_exclusion(self):
        store = store_with_mailboxes(3)
        store.find = AsyncMock(side_effect=[StoreError("timeout"), [{"id": "junk"}, {"id": "trash"}]])
        scope = await MailboxScopeResolver(store).resolve(USER_ID)
        assert scope.strategy is ScopeStrategy.EXCLUDE
        assert scope.mailbox_ids == ("junk", "trash")

    @pytest.mark.asyncio
    async def test_failed_exclusion_listing_is_internal_error(self):
        store = store_with_mailboxes(300)
        store.find = AsyncMock(side_effect=StoreError("timeout"))
        with pytest.raises(InternalLookupError):
            await MailboxScopeResolver(store).resolve(USER_ID)

    @pytest.mark.asyncio
    async def test_custom_threshold(self):
        store = store_with_mailboxes(5)
        resolver = MailboxScopeResolver(store, threshold=5)
        assert resolver.threshold == 5
        assert (await resolver.resolve(USER_ID)).strategy is ScopeStrategy.EXCLUDE

    def test_threshold_from_settings(self):
        settings = Settings(scope_threshold=50)
        assert MailboxScopeResolver.from_settings(InMemoryStore(), settings).threshold == 50

    @pytest.mark.asyncio
    async def test_other_users_mailboxes_ignored(self):
        store = store_with_mailboxes(2)
        store.insert(MAILBOXES, {"id": "foreign", "user": "u2", "path": "INBOX"})
        scope = await MailboxScopeResolver(store).resolve(USER_ID)
        assert scope.mailbox_ids == ("mb0000", "mb0001")


class TestEquivalence:
    @pytest.mark.asyncio
    async def test_both_strategies_select_the_same_messages(self):
        store = store_with_mailboxes(4)
        store.insert(
            MESSAGES,
            message(1, mailbox="mb0000"),
            message(2, mailbox="mb0003"),
            message(3, mailbox="junk"),
            message(4, mailbox="trash"),
            message(5, mailbox="mb0001"),
        )

        included = await MailboxScopeResolver(store).resolve(USER_ID)
        excluded = await MailboxScopeResolver(store, threshold=1).resolve(USER_ID)
        assert included.strategy is ScopeStrategy.INCLUDE
        assert excluded.strategy is ScopeStrategy.EXCLUDE

        ids_included = [d["id"] for d in await store.find(MESSAGES, included.predicate(), sort="asc")]
        ids_excluded = [d["id"] for d in await store.find(MESSAGES, excluded.predicate(), sort="asc")]
        assert ids_included == ids_excluded == [1, 2, 5]
