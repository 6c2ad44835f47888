"""Predicate tree for message filters.

Every filter handed to a :class:`~umbrella_search.store.MessageStore` is a tree
of the immutable nodes defined here.  Backends either render the tree into
their own query language (see :mod:`umbrella_search.es.queries`) or evaluate it
directly with :meth:`Predicate.matches`.

Evaluation follows document-store semantics:

* field names are dotted paths into nested dicts (``search.from``);
* a list-valued field matches when *any* element matches;
* ``NotMemberOf`` matches records where the field is missing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

_MISSING = object()


def resolve_path(record: dict[str, Any], path: str) -> Any:
    """Return the value at dotted *path* in *record*, or ``_MISSING``."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _candidates(value: Any) -> list[Any]:
    if value is _MISSING or value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class Predicate:
    """Base class for all predicate nodes."""

    kind: ClassVar[str] = ""

    def matches(self, record: dict[str, Any]) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Predicate):
    field: str
    value: Any

    kind: ClassVar[str] = "eq"

    def matches(self, record: dict[str, Any]) -> bool:
        return any(v == self.value for v in _candidates(resolve_path(record, self.field)))


@dataclass(frozen=True)
class Range(Predicate):
    """Range over *field*; bounds left as ``None`` are open.

    ``gte``/``lte`` are inclusive, ``gt``/``lt`` exclusive.
    """

    field: str
    gte: Any = None
    lte: Any = None
    gt: Any = None
    lt: Any = None

    kind: ClassVar[str] = "range"

    def matches(self, record: dict[str, Any]) -> bool:
        for v in _candidates(resolve_path(record, self.field)):
            try:
                if self.gte is not None and v < self.gte:
                    continue
                if self.lte is not None and v > self.lte:
                    continue
                if self.gt is not None and v <= self.gt:
                    continue
                if self.lt is not None and v >= self.lt:
                    continue
            except TypeError:
                continue
            return True
        return False


@dataclass(frozen=True)
class MemberOf(Predicate):
    field: str
    values: tuple[Any, ...]

    kind: ClassVar[str] = "member_of"

    def matches(self, record: dict[str, Any]) -> bool:
        return any(v in self.values for v in _candidates(resolve_path(record, self.field)))


@dataclass(frozen=True)
class NotMemberOf(Predicate):
    field: str
    values: tuple[Any, ...]

    kind: ClassVar[str] = "not_member_of"

    def matches(self, record: dict[str, Any]) -> bool:
        return not any(v in self.values for v in _candidates(resolve_path(record, self.field)))


@dataclass(frozen=True)
class Pattern(Predicate):
    """Case-insensitive match of the literal *text* inside a string field.

    With ``prefix=True`` the literal must start the value, otherwise it may
    appear anywhere.
    """

    field: str
    text: str
    prefix: bool = False

    kind: ClassVar[str] = "pattern"

    @property
    def regex(self) -> str:
        escaped = re.escape(self.text)
        return "^" + escaped if self.prefix else escaped

    def matches(self, record: dict[str, Any]) -> bool:
        compiled = re.compile(self.regex, re.IGNORECASE)
        return any(
            isinstance(v, str) and compiled.search(v) is not None
            for v in _candidates(resolve_path(record, self.field))
        )


@dataclass(frozen=True)
class TextSearch(Predicate):
    """Full-text match over the message ``subject`` and ``text`` fields.

    A record matches when any query term occurs as a word in those fields.
    """

    query: str

    kind: ClassVar[str] = "text"
    fields: ClassVar[tuple[str, ...]] = ("subject", "text")

    def matches(self, record: dict[str, Any]) -> bool:
        terms = set(self.query.lower().split())
        if not terms:
            return False
        words: set[str] = set()
        for name in self.fields:
            for v in _candidates(resolve_path(record, name)):
                if isinstance(v, str):
                    words.update(re.findall(r"\w+", v.lower()))
        return bool(terms & words)


@dataclass(frozen=True)
class Exists(Predicate):
    field: str
    present: bool = True

    kind: ClassVar[str] = "exists"

    def matches(self, record: dict[str, Any]) -> bool:
        found = resolve_path(record, self.field) is not _MISSING
        return found if self.present else not found


@dataclass(frozen=True)
class And(Predicate):
    clauses: tuple[Predicate, ...]

    kind: ClassVar[str] = "and"

    def matches(self, record: dict[str, Any]) -> bool:
        return all(c.matches(record) for c in self.clauses)

    def find(self, field: str) -> list[Predicate]:
        """Top-level clauses constraining *field* (handy for callers and tests)."""
        return [c for c in self.clauses if getattr(c, "field", None) == field]


@dataclass(frozen=True)
class Or(Predicate):
    clauses: tuple[Predicate, ...]

    kind: ClassVar[str] = "or"

    def matches(self, record: dict[str, Any]) -> bool:
        return any(c.matches(record) for c in self.clauses)


def all_of(*clauses: Predicate) -> And:
    return And(tuple(clauses))


def any_of(*clauses: Predicate) -> Or:
    return Or(tuple(clauses))
