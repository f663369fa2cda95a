"""Gmail thread listing and detail fetching with pagination and rate limiting."""

import logging
import os
import time
from typing import Any, Callable

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from ticketlens.auth import get_gmail_service

from .cache import ThreadCache

logger = logging.getLogger(__name__)

METADATA_HEADERS = ["Subject", "From", "To", "Date"]

MAX_RETRIES = 5


def get_thread_query() -> str | None:
    """Get the optional Gmail search query restricting which threads are listed."""
    return os.getenv("THREAD_QUERY") or None


def _handle_rate_limit(retry_count: int) -> None:
    """Handle rate limiting with exponential backoff."""
    wait_time = min(2**retry_count, 60)  # Max 60 seconds
    logger.info("Rate limited, retrying in %ds", wait_time)
    time.sleep(wait_time)


def _execute_with_retry(request: Any) -> dict[str, Any]:
    """Execute an API request, backing off on HTTP 429."""
    retries = 0
    while True:
        try:
            return request.execute()
        except HttpError as e:
            if e.resp.status == 429 and retries < MAX_RETRIES:
                retries += 1
                _handle_rate_limit(retries)
                continue
            raise


def list_thread_ids(
    service: Resource,
    query: str | None = None,
    max_results_per_page: int = 500,
) -> list[str]:
    """
    List every thread id in the mailbox, following nextPageToken.

    Args:
        service: Gmail API service.
        query: Optional Gmail search query.
        max_results_per_page: Page size (API maximum is 500).

    Returns:
        Thread ids in the order the API returns them.
    """
    thread_ids = []
    page_token = None

    while True:
        params = {"userId": "me", "maxResults": max_results_per_page}
        if page_token:
            params["pageToken"] = page_token
        if query:
            params["q"] = query

        results = _execute_with_retry(service.users().threads().list(**params))
        thread_ids.extend(t["id"] for t in results.get("threads", []))

        page_token = results.get("nextPageToken")
        if not page_token:
            break

    return thread_ids


def get_thread(service: Resource, thread_id: str) -> dict[str, Any]:
    """Fetch a thread's message metadata (labels, headers, internal dates)."""
    request = (
        service.users()
        .threads()
        .get(
            userId="me",
            id=thread_id,
            format="metadata",
            metadataHeaders=METADATA_HEADERS,
        )
    )
    return _execute_with_retry(request)


def fetch_threads(
    service: Resource | None = None,
    cache: ThreadCache | None = None,
    use_cache: bool = True,
    query: str | None = None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> list[dict[str, Any]]:
    """
    Fetch all threads with message metadata.

    Threads that fail with a non-rate-limit HTTP error are logged and
    skipped so one bad thread does not abort the run.

    Args:
        service: Gmail API service. Created if not provided.
        cache: Thread cache instance. Created if not provided.
        use_cache: Whether to return cached threads if fresh.
        query: Gmail search query. Defaults to THREAD_QUERY env var.
        progress_callback: Optional callback for progress updates (current, total).

    Returns:
        Raw thread payloads from `users.threads.get`.
    """
    if cache is None:
        cache = ThreadCache()

    if use_cache and cache.is_fresh():
        cached = cache.get_cached_threads()
        if cached:
            return cached

    if service is None:
        service = get_gmail_service()

    if query is None:
        query = get_thread_query()

    thread_ids = list_thread_ids(service, query=query)
    total = len(thread_ids)
    logger.info("Found %d threads", total)

    threads = []
    for position, thread_id in enumerate(thread_ids, start=1):
        try:
            threads.append(get_thread(service, thread_id))
        except HttpError as e:
            logger.warning("Skipping thread %s: %s", thread_id, e)

        if progress_callback:
            progress_callback(position, total)

    cache.cache_threads(threads)

    return threads
