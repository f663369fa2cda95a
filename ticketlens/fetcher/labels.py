"""Gmail label catalog fetching."""

import logging

from googleapiclient.discovery import Resource

from ticketlens.auth import get_gmail_service
from ticketlens.models import Label

from .cache import ThreadCache

logger = logging.getLogger(__name__)


def fetch_labels(
    service: Resource | None = None,
    cache: ThreadCache | None = None,
    use_cache: bool = True,
) -> list[Label]:
    """
    Fetch the account's label catalog.

    Args:
        service: Gmail API service. Created if not provided.
        cache: Thread cache instance. Created if not provided.
        use_cache: Whether to return cached labels if available.

    Returns:
        List of labels with id, name and type.
    """
    if cache is None:
        cache = ThreadCache()

    if use_cache:
        cached_labels = cache.get_cached_labels()
        if cached_labels:
            return cached_labels

    if service is None:
        service = get_gmail_service()

    results = service.users().labels().list(userId="me").execute()
    labels = [Label.from_api(raw) for raw in results.get("labels", [])]
    logger.info("Fetched %d labels", len(labels))

    cache.cache_labels(labels)

    return labels
