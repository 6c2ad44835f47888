"""Derive denormalized search fields from a stored IMAP envelope.

Envelope layout (positional)::

    [0] date         [1] subject      [2] from       [3] sender
    [4] reply-to     [5] to           [6] cc         [7] bcc
    [8] in-reply-to  [9] message-id

Address lists hold ``[name, route, mailbox, host]`` entries.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .models import SearchIndex

ENVELOPE_SUBJECT = 1
ENVELOPE_FROM = 2
ENVELOPE_TO = 5
ENVELOPE_CC = 6


def _position(envelope: Any, index: int) -> Any:
    if isinstance(envelope, Sequence) and not isinstance(envelope, str) and len(envelope) > index:
        return envelope[index]
    return None


def _addresses_and_names(entries: Any) -> tuple[list[str] | None, str | None]:
    """Return (addresses, joined names) for one address list, ``None`` when empty."""
    if not isinstance(entries, list):
        return None, None

    addresses: list[str] = []
    names: list[str] = []
    for entry in entries:
        if not isinstance(entry, (list, tuple)):
            continue
        name, mailbox, host = _at(entry, 0), _at(entry, 2), _at(entry, 3)
        if mailbox and host:
            addresses.append(f"{_text(mailbox)}@{_text(host)}".lower().strip())
        if name:
            cleaned = _text(name).lower().strip()
            if cleaned:
                names.append(cleaned)

    return addresses or None, " ".join(names) or None


def _at(entry: Sequence[Any], index: int) -> Any:
    return entry[index] if len(entry) > index else None


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def build_search_index(envelope: Any, subject: str | None = None) -> SearchIndex:
    """Build the ``search`` fields for a message.

    *subject* is the already-decoded subject stored on the message; when it is
    missing the raw envelope subject is used, so a message without an
    envelope still gets its subject indexed.  Malformed envelopes never raise:
    whatever cannot be read is simply left out.
    """
    from_, from_name = _addresses_and_names(_position(envelope, ENVELOPE_FROM))
    to, to_name = _addresses_and_names(_position(envelope, ENVELOPE_TO))
    cc, cc_name = _addresses_and_names(_position(envelope, ENVELOPE_CC))

    raw_subject = subject or _position(envelope, ENVELOPE_SUBJECT)
    if not isinstance(raw_subject, (str, bytes)):
        raw_subject = ""
    normalized = _text(raw_subject).lower().strip()

    return SearchIndex(
        from_=from_,
        from_name=from_name,
        to=to,
        to_name=to_name,
        cc=cc,
        cc_name=cc_name,
        subject=normalized or None,
        subject_words=normalized.split() or None,
    )
