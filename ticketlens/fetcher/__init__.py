"""Fetcher module for Gmail data retrieval and caching."""

from .cache import ThreadCache
from .labels import fetch_labels
from .threads import fetch_threads, get_thread, list_thread_ids

__all__ = [
    "ThreadCache",
    "fetch_labels",
    "fetch_threads",
    "get_thread",
    "list_thread_ids",
]
