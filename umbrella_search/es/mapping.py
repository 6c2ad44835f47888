"""Index mappings for users, mailboxes and messages."""

from __future__ import annotations

USER_MAPPING: dict = {
    "properties": {
        "id": {"type": "keyword"},
        "username": {"type": "keyword"},
        "name": {"type": "text"},
        "address": {"type": "keyword"},
        "special_use": {"type": "object", "enabled": False},
    }
}

MAILBOX_MAPPING: dict = {
    "properties": {
        "id": {"type": "keyword"},
        "user": {"type": "keyword"},
        "path": {"type": "keyword"},
        "special_use": {"type": "keyword"},
    }
}

MESSAGE_MAPPING: dict = {
    "properties": {
        "id": {"type": "keyword"},
        "user": {"type": "keyword"},
        "mailbox": {"type": "keyword"},
        "thread": {"type": "keyword"},
        "uid": {"type": "long"},
        "idate": {"type": "date"},
        "size": {"type": "long"},
        "ha": {"type": "boolean"},
        "flagged": {"type": "boolean"},
        "unseen": {"type": "boolean"},
        "searchable": {"type": "boolean"},
        "subject": {"type": "text"},
        "text": {"type": "text"},
        "envelope": {"type": "object", "enabled": False},
        "search": {
            "properties": {
                "from": {"type": "keyword"},
                "fromName": {"type": "keyword"},
                "to": {"type": "keyword"},
                "toName": {"type": "keyword"},
                "cc": {"type": "keyword"},
                "ccName": {"type": "keyword"},
                "subject": {"type": "keyword"},
                "subjectWords": {"type": "keyword"},
            }
        },
    }
}
