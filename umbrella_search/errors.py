"""Exceptions raised by the search layer."""

from __future__ import annotations


class SearchError(Exception):
    """Base exception for all umbrella-search errors.

    ``code`` and ``status_code`` let an API layer map the error onto a
    response without inspecting the exception type.
    """

    code: str = "SearchError"
    status_code: int = 500
    formatted_message: str = "Search error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.formatted_message)


class NotFound(SearchError):
    """The owning user of a search does not exist."""

    code = "UserNotFound"
    status_code = 404
    formatted_message = "This user does not exist"


class InternalLookupError(SearchError):
    """A storage failure while resolving search context."""

    code = "InternalDatabaseError"
    status_code = 500
    formatted_message = "Database Error"


class StoreError(SearchError):
    """Raised by MessageStore backends when the underlying storage fails."""

    code = "StoreError"
