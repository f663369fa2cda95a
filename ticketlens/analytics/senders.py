"""Thread sender extraction and grouping keys."""

import re
from typing import Sequence

from ticketlens.models import Message

from .rules import UNKNOWN_SENDER

_ANGLE_ADDRESS = re.compile(r"<(.+?)>")


def get_header_value(message: Message, name: str) -> str | None:
    """Get a header value by name (case-insensitive), or None if absent."""
    name_lower = name.lower()
    for header in message.headers:
        if header.name.lower() == name_lower:
            return header.value
    return None


def extract_sender(messages: Sequence[Message] | None) -> str:
    """
    Get the raw From header of the thread's first message.

    Returns:
        Header value as-is, or "Unknown" if there is no message or no From.
    """
    if not messages:
        return UNKNOWN_SENDER

    sender = get_header_value(messages[0], "From")
    return sender if sender is not None else UNKNOWN_SENDER


def sender_key(raw: str) -> str:
    """
    Normalize a sender for grouping.

    "Jane Doe <jane@x.com>" and "jane@x.com" both map to "jane@x.com".
    """
    match = _ANGLE_ADDRESS.search(raw)
    return match.group(1) if match else raw
