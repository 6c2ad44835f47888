"""Parser for textual uid range expressions (``5``, ``1,3,7``, ``10:20``, ``10:*``)."""

from __future__ import annotations

import math
import re

from .predicates import Eq, MemberOf, Predicate, Range

_SINGLE_RE = re.compile(r"\d+", re.ASCII)
_LIST_RE = re.compile(r"\d+(,\d+)*", re.ASCII)
_RANGE_RE = re.compile(r"\d+:(\d+|\*)", re.ASCII)


def _bound(part: str) -> float | int:
    return math.inf if part == "*" else int(part)


def parse_uid_range(expr: str | None, field: str = "uid") -> Predicate | None:
    """Turn a uid expression into a predicate on *field*.

    Unrecognised input returns ``None``, which callers treat as "no uid
    constraint" rather than as an error.
    """
    if not expr:
        return None

    if _SINGLE_RE.fullmatch(expr):
        return Eq(field, int(expr))

    if _LIST_RE.fullmatch(expr):
        return MemberOf(field, tuple(sorted(int(uid) for uid in expr.split(","))))

    if _RANGE_RE.fullmatch(expr):
        low, high = sorted(_bound(part) for part in expr.split(":"))
        if low == high:
            return Eq(field, low)
        return Range(field, gte=low, lte=None if high == math.inf else high)

    return None
