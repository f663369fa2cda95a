"""Label naming rules for department and status classification."""

import os

# Provider-reserved labels never treated as a department
IGNORED_LABELS = frozenset(
    {
        "INBOX",
        "SENT",
        "IMPORTANT",
        "CATEGORY_PERSONAL",
        "UNREAD",
        "STARRED",
        "CHAT",
        "TRASH",
        "DRAFT",
        "SPAM",
        "CATEGORY_FORUMS",
        "CATEGORY_UPDATES",
        "CATEGORY_PROMOTIONS",
        "CATEGORY_SOCIAL",
    }
)

UNDEFINED_SECTOR = "Undefined"
UNKNOWN_SENDER = "Unknown"

DEFAULT_SECTOR_PREFIX = "Setor"

DEFAULT_STATUS_LABELS = {
    "resolved": "Chamados Fechados",
    "open": "Chamados em Aberto",
    "in_progress": "Chamados em Andamento",
}


def get_sector_prefix() -> str:
    """Get the label-name prefix that marks a department label."""
    return os.getenv("SECTOR_PREFIX", DEFAULT_SECTOR_PREFIX)


def get_status_labels() -> dict[str, str]:
    """
    Get the status label names, upper-cased for comparison.

    Returns:
        Mapping of status field ("resolved", "open", "in_progress") to label name.
    """
    return {
        "resolved": os.getenv(
            "STATUS_RESOLVED_LABEL", DEFAULT_STATUS_LABELS["resolved"]
        ).upper(),
        "open": os.getenv("STATUS_OPEN_LABEL", DEFAULT_STATUS_LABELS["open"]).upper(),
        "in_progress": os.getenv(
            "STATUS_IN_PROGRESS_LABEL", DEFAULT_STATUS_LABELS["in_progress"]
        ).upper(),
    }
