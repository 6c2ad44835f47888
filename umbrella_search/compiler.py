"""Compile a SearchPayload into a predicate tree over message documents.

The filter always restricts to the owning user.  Address, name and subject
criteria rely on the denormalized ``search`` fields written at delivery time
(and back-filled for older messages by :mod:`umbrella_search.migration`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from .errors import InternalLookupError, NotFound, StoreError
from .models import SearchPayload
from .predicates import And, Eq, Or, Pattern, Predicate, Range, TextSearch
from .ranges import parse_uid_range
from .scope import MailboxScope, MailboxScopeResolver
from .store import MessageStore

logger = structlog.get_logger()

FROM_FIELDS = ("search.from",)
FROM_NAME_FIELDS = ("search.fromName",)
TO_FIELDS = ("search.to", "search.cc")
TO_NAME_FIELDS = ("search.toName", "search.ccName")
SUBJECT_WORDS_FIELD = "search.subjectWords"


@dataclass(frozen=True)
class SearchFilter:
    """A compiled filter plus the free-text query it was built from."""

    filter: And
    query: str | None = None


class FilterBuilder:
    """Accumulates predicates and produces an immutable ``And`` tree.

    * ``set`` holds one predicate per field; setting a field again replaces it
      in place.
    * ``merge_range`` folds bounds on the same field into a single ``Range``.
    * ``require`` appends to the conjunction group (several per field).
    * ``either`` appends to the OR group, emitted as one ``Or`` clause.
    """

    def __init__(self) -> None:
        self._slots: dict[str, Predicate] = {}
        self._conjunction: list[Predicate] = []
        self._disjunction: list[Predicate] = []

    @staticmethod
    def _key(predicate: Predicate) -> str:
        return getattr(predicate, "field", None) or predicate.kind

    def set(self, predicate: Predicate) -> FilterBuilder:
        self._slots[self._key(predicate)] = predicate
        return self

    def get(self, field: str) -> Predicate | None:
        return self._slots.get(field)

    def merge_range(self, field: str, *, gte: Any = None, lte: Any = None) -> FilterBuilder:
        current = self._slots.get(field)
        if isinstance(current, Range):
            gte = current.gte if gte is None else gte
            lte = current.lte if lte is None else lte
        self._slots[field] = Range(field, gte=gte, lte=lte)
        return self

    def require(self, predicate: Predicate) -> FilterBuilder:
        self._conjunction.append(predicate)
        return self

    def either(self, predicate: Predicate) -> FilterBuilder:
        self._disjunction.append(predicate)
        return self

    def build(self) -> And:
        clauses = [*self._slots.values(), *self._conjunction]
        if self._disjunction:
            clauses.append(Or(tuple(self._disjunction)))
        return And(tuple(clauses))


def _normalize(term: str) -> str:
    return term.lower().strip()


def _match_any(fields: tuple[str, ...], make) -> Predicate:
    predicates = [make(field) for field in fields]
    return predicates[0] if len(predicates) == 1 else Or(tuple(predicates))


def address_predicate(
    term: str,
    address_fields: tuple[str, ...],
    name_fields: tuple[str, ...],
) -> Predicate:
    """Exact address match when *term* contains ``@``, name fragment otherwise."""
    if "@" in term:
        return _match_any(address_fields, lambda field: Eq(field, term))
    return _match_any(name_fields, lambda field: Pattern(field, term))


def subject_predicates(term: str) -> list[Predicate]:
    """One word-prefix predicate per whitespace-separated word of *term*."""
    return [Pattern(SUBJECT_WORDS_FIELD, word, prefix=True) for word in term.split()]


class SearchFilterCompiler:
    """Build message filters for a user's search requests.

    Per call this performs one user lookup and, for broad ``searchable``
    searches, the count and listing done by :class:`MailboxScopeResolver`.
    Instances hold no per-request state and may be shared.
    """

    def __init__(
        self,
        store: MessageStore,
        *,
        scope_resolver: MailboxScopeResolver | None = None,
    ) -> None:
        self._store = store
        self._scope_resolver = scope_resolver or MailboxScopeResolver(store)

    async def compile(self, payload: SearchPayload, user: str) -> SearchFilter:
        try:
            identity = await self._store.get_user(user)
        except StoreError as exc:
            raise InternalLookupError() from exc
        if identity is None:
            raise NotFound()

        builder = FilterBuilder().set(Eq("user", identity.id))
        or_terms = payload.or_

        if payload.query:
            builder.set(Eq("searchable", True)).set(TextSearch(payload.query))
        elif or_terms.query:
            builder.either(TextSearch(or_terms.query))

        scope: MailboxScope | None = None
        if payload.mailbox:
            scope = MailboxScope.explicit(payload.mailbox)
        elif payload.searchable:
            scope = await self._scope_resolver.resolve(identity.id)
        if scope is not None:
            builder.set(scope.predicate())

            uid_predicate = parse_uid_range(payload.id)
            if uid_predicate is not None:
                builder.set(uid_predicate)

        if payload.thread:
            builder.set(Eq("thread", payload.thread))

        if payload.flagged:
            builder.set(Eq("flagged", True))

        if payload.seen:
            builder.set(Eq("unseen", False)).set(Eq("searchable", True))

        # unseen wins over seen
        if payload.unseen:
            builder.set(Eq("unseen", True)).set(Eq("searchable", True))

        if payload.searchable:
            builder.set(Eq("searchable", True))

        if payload.datestart:
            builder.merge_range("idate", gte=payload.datestart)
        if payload.dateend:
            builder.merge_range("idate", lte=payload.dateend)

        self._add_address_terms(builder, payload)
        self._add_subject_terms(builder, payload)

        if payload.attachments:
            builder.set(Eq("ha", True))

        if payload.min_size:
            builder.merge_range("size", gte=payload.min_size)
        if payload.max_size:
            builder.merge_range("size", lte=payload.max_size)

        compiled = builder.build()
        logger.debug(
            "search_filter_compiled",
            user=identity.id,
            clauses=len(compiled.clauses),
            scope=scope.strategy.value if scope else None,
        )
        return SearchFilter(filter=compiled, query=payload.query)

    @staticmethod
    def _add_address_terms(builder: FilterBuilder, payload: SearchPayload) -> None:
        or_terms = payload.or_

        if payload.from_ and (term := _normalize(payload.from_)):
            builder.require(address_predicate(term, FROM_FIELDS, FROM_NAME_FIELDS))

        if or_terms.from_ and (term := _normalize(or_terms.from_)):
            builder.either(address_predicate(term, FROM_FIELDS, FROM_NAME_FIELDS))

        if payload.to and (term := _normalize(payload.to)):
            builder.require(address_predicate(term, TO_FIELDS, TO_NAME_FIELDS))

        if or_terms.to and (term := _normalize(or_terms.to)):
            builder.either(address_predicate(term, TO_FIELDS, TO_NAME_FIELDS))

    @staticmethod
    def _add_subject_terms(builder: FilterBuilder, payload: SearchPayload) -> None:
        if payload.subject:
            for predicate in subject_predicates(_normalize(payload.subject)):
                builder.require(predicate)

        if payload.or_.subject:
            words = subject_predicates(_normalize(payload.or_.subject))
            if len(words) == 1:
                builder.either(words[0])
            elif words:
                builder.either(And(tuple(words)))


async def compile_search_filter(
    store: MessageStore,
    payload: SearchPayload,
    user: str,
) -> SearchFilter:
    """Convenience wrapper around :meth:`SearchFilterCompiler.compile`."""
    return await SearchFilterCompiler(store).compile(payload, user)
