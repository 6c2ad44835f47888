"""Pydantic models shared by the compiler, the migration and the stores."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

JUNK = "\\Junk"
TRASH = "\\Trash"
EXCLUDED_SPECIAL_USE: tuple[str, ...] = (JUNK, TRASH)


class OrTerms(BaseModel):
    """Criteria of which at least one must match."""

    model_config = ConfigDict(populate_by_name=True)

    query: str | None = None
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    subject: str | None = None


class SearchPayload(BaseModel):
    """Caller-supplied search criteria. Every field is optional."""

    model_config = ConfigDict(populate_by_name=True)

    mailbox: str | None = None
    thread: str | None = None
    id: str | None = Field(default=None, description="uid expression, e.g. 1:* or 3,5,8")
    query: str | None = None
    or_: OrTerms = Field(default_factory=OrTerms, alias="or")

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    subject: str | None = None

    attachments: bool = False
    flagged: bool = False
    seen: bool = False
    unseen: bool = False
    searchable: bool = False

    datestart: datetime | None = None
    dateend: datetime | None = None
    min_size: int | None = Field(default=None, alias="minSize")
    max_size: int | None = Field(default=None, alias="maxSize")

    @field_validator("or_", mode="before")
    @classmethod
    def _null_or_group(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("attachments", "flagged", "seen", "unseen", "searchable", mode="before")
    @classmethod
    def _null_flag(cls, value: Any) -> Any:
        return False if value is None else value


class IdentityRecord(BaseModel):
    """The user whose messages are searched."""

    id: str
    username: str
    name: str | None = None
    address: str | None = None
    special_use: dict[str, str] = Field(default_factory=dict)


class Mailbox(BaseModel):
    id: str
    user: str
    path: str
    special_use: str | None = None


class SearchIndex(BaseModel):
    """Denormalized search fields stored under ``search`` on a message.

    Use :meth:`to_document` for the stored shape: wire names, empty fields
    dropped.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_: list[str] | None = Field(default=None, alias="from")
    from_name: str | None = Field(default=None, alias="fromName")
    to: list[str] | None = None
    to_name: str | None = Field(default=None, alias="toName")
    cc: list[str] | None = None
    cc_name: str | None = Field(default=None, alias="ccName")
    subject: str | None = None
    subject_words: list[str] | None = Field(default=None, alias="subjectWords")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
