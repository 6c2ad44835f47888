"""Render predicate trees as Elasticsearch query DSL."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from umbrella_search.predicates import (
    And,
    Eq,
    Exists,
    MemberOf,
    NotMemberOf,
    Or,
    Pattern,
    Predicate,
    Range,
    TextSearch,
)

TEXT_FIELDS = ["subject", "text"]

_WILDCARD_SPECIAL = str.maketrans({"\\": "\\\\", "*": "\\*", "?": "\\?"})


def _value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _pattern_query(predicate: Pattern) -> dict:
    if predicate.prefix:
        return {"prefix": {predicate.field: {"value": predicate.text, "case_insensitive": True}}}
    escaped = predicate.text.translate(_WILDCARD_SPECIAL)
    return {"wildcard": {predicate.field: {"value": f"*{escaped}*", "case_insensitive": True}}}


def _range_query(predicate: Range) -> dict:
    bounds = {
        op: _value(bound)
        for op, bound in (
            ("gte", predicate.gte),
            ("lte", predicate.lte),
            ("gt", predicate.gt),
            ("lt", predicate.lt),
        )
        if bound is not None
    }
    return {"range": {predicate.field: bounds}}


def to_es_query(predicate: Predicate | None) -> dict:
    """Translate *predicate* into an ES ``query`` clause.

    ``And`` becomes a ``bool`` query: full-text clauses go to ``must`` so they
    contribute to scoring, everything else to ``filter``.
    """
    if predicate is None:
        return {"match_all": {}}

    if isinstance(predicate, Eq):
        return {"term": {predicate.field: _value(predicate.value)}}

    if isinstance(predicate, Range):
        return _range_query(predicate)

    if isinstance(predicate, MemberOf):
        return {"terms": {predicate.field: [_value(v) for v in predicate.values]}}

    if isinstance(predicate, NotMemberOf):
        return {"bool": {"must_not": [{"terms": {predicate.field: [_value(v) for v in predicate.values]}}]}}

    if isinstance(predicate, Pattern):
        return _pattern_query(predicate)

    if isinstance(predicate, TextSearch):
        return {
            "multi_match": {
                "query": predicate.query,
                "fields": TEXT_FIELDS,
                "type": "best_fields",
            }
        }

    if isinstance(predicate, Exists):
        clause = {"exists": {"field": predicate.field}}
        return clause if predicate.present else {"bool": {"must_not": [clause]}}

    if isinstance(predicate, And):
        must: list[dict] = []
        filters: list[dict] = []
        for clause in predicate.clauses:
            target = must if isinstance(clause, TextSearch) else filters
            target.append(to_es_query(clause))
        body: dict = {"filter": filters}
        if must:
            body["must"] = must
        return {"bool": body}

    if isinstance(predicate, Or):
        return {
            "bool": {
                "should": [to_es_query(clause) for clause in predicate.clauses],
                "minimum_should_match": 1,
            }
        }

    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")


def build_message_search(
    predicate: Predicate,
    *,
    offset: int = 0,
    limit: int = 20,
) -> dict:
    """Build a search body for the messages index from a compiled filter.

    Newest messages first; callers that want relevance ordering sort on
    ``_score`` themselves.
    """
    return {
        "query": to_es_query(predicate),
        "sort": [{"idate": {"order": "desc"}}],
        "from": offset,
        "size": limit,
    }
