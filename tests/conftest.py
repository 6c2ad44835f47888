"""Shared test fixtures for the umbrella-search test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import structlog

from umbrella_search.config import MigrationConfig
from umbrella_search.models import JUNK, TRASH
from umbrella_search.store import MAILBOXES, MESSAGES, USERS, InMemoryStore

USER_ID = "u1"


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any structlog configuration a test applied (keeps capture_logs usable)."""
    yield
    structlog.reset_defaults()


# ------------------------------------------------------------------
# Sample documents
# ------------------------------------------------------------------


def address(name: str | None, mailbox: str | None, host: str | None) -> list:
    return [name, None, mailbox, host]


def envelope(
    *,
    subject: str = "Quarterly report",
    from_: list | None = None,
    to: list | None = None,
    cc: list | None = None,
) -> list:
    """Build a positional envelope in the stored layout."""
    return [
        "Mon, 01 Jun 2025 12:00:00 +0000",
        subject,
        from_ if from_ is not None else [address("Alice Smith", "alice", "x.com")],
        None,
        None,
        to if to is not None else [address("Bob Jones", "bob", "y.com")],
        cc or [],
        [],
        None,
        "<msg@x.com>",
    ]


def message(msg_id: int, **fields) -> dict:
    doc = {
        "id": msg_id,
        "user": USER_ID,
        "mailbox": "inbox",
        "uid": msg_id,
        "thread": f"t{msg_id}",
        "searchable": True,
        "unseen": False,
        "flagged": False,
        "ha": False,
        "size": 1000,
        "idate": datetime(2025, 6, 1, tzinfo=timezone.utc),
        "subject": "Quarterly report",
        "text": "numbers attached",
        "envelope": envelope(),
    }
    doc.update(fields)
    return doc


@pytest.fixture
def store() -> InMemoryStore:
    """A user with an inbox, a project folder, Junk and Trash."""
    s = InMemoryStore()
    s.insert(USERS, {"id": USER_ID, "username": "alice", "name": "Alice Smith", "address": "alice@x.com"})
    s.insert(
        MAILBOXES,
        {"id": "inbox", "user": USER_ID, "path": "INBOX"},
        {"id": "projects", "user": USER_ID, "path": "Projects"},
        {"id": "junk", "user": USER_ID, "path": "Junk", "special_use": JUNK},
        {"id": "trash", "user": USER_ID, "path": "Trash", "special_use": TRASH},
        {"id": "other-inbox", "user": "u2", "path": "INBOX"},
    )
    return s


@pytest.fixture
def migration_config() -> MigrationConfig:
    return MigrationConfig(enabled=True, batch_size=1000)


@pytest.fixture
def messages_store() -> InMemoryStore:
    """Five legacy messages without a ``search`` field."""
    s = InMemoryStore()
    s.insert(
        MESSAGES,
        *[
            message(
                i,
                subject=f"Report {i}",
                envelope=envelope(
                    subject=f"=?utf-8?q?Report_{i}?=",
                    from_=[address(f"Sender {i}", f"sender{i}", "Example.COM")],
                ),
            )
            for i in range(1, 6)
        ],
    )
    return s
