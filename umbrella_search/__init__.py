"""Umbrella search: compile mailbox search requests and maintain search fields.

Public API re-exported here for convenience::

    from umbrella_search import SearchFilterCompiler, SearchPayload, SearchFieldsMigration
"""

from .compiler import FilterBuilder, SearchFilter, SearchFilterCompiler, compile_search_filter
from .config import MigrationConfig, Settings
from .envelope import build_search_index
from .errors import InternalLookupError, NotFound, SearchError, StoreError
from .logging import setup_logging
from .migration import MigrationResult, MigrationState, SearchFieldsMigration
from .models import IdentityRecord, Mailbox, OrTerms, SearchIndex, SearchPayload
from .ranges import parse_uid_range
from .scope import MailboxScope, MailboxScopeResolver, ScopeStrategy
from .store import InMemoryStore, MessageStore

__all__ = [
    "FilterBuilder",
    "IdentityRecord",
    "InMemoryStore",
    "InternalLookupError",
    "Mailbox",
    "MailboxScope",
    "MailboxScopeResolver",
    "MessageStore",
    "MigrationConfig",
    "MigrationResult",
    "MigrationState",
    "NotFound",
    "OrTerms",
    "ScopeStrategy",
    "SearchError",
    "SearchFieldsMigration",
    "SearchFilter",
    "SearchFilterCompiler",
    "SearchIndex",
    "SearchPayload",
    "Settings",
    "StoreError",
    "build_search_index",
    "compile_search_filter",
    "parse_uid_range",
    "setup_logging",
]
