"""Elasticsearch backend: query rendering, client wrapper and store."""

from .client import ESClient
from .queries import build_message_search, to_es_query
from .store import ElasticsearchMessageStore

__all__ = [
    "ESClient",
    "ElasticsearchMessageStore",
    "build_message_search",
    "to_es_query",
]
