"""Document-store backends for users, mailboxes and messages."""

from .base import MAILBOXES, MESSAGES, USERS, MessageStore
from .memory import InMemoryStore

__all__ = [
    "InMemoryStore",
    "MAILBOXES",
    "MESSAGES",
    "MessageStore",
    "USERS",
]
