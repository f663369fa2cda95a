"""First-response timing for support threads."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ticketlens.models import Message

MS_PER_HOUR = 60 * 60 * 1000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Timing:
    opened_at: str | None = None
    responded_at: str | None = None
    response_hours: float | None = None


def round2(value: float) -> float:
    """Round to 2 decimals, ties away from zero (0.125 -> 0.13)."""
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_timestamp(millis: int) -> str:
    """Format epoch milliseconds as ISO-8601 UTC, e.g. 2024-01-05T09:30:00.000Z."""
    dt = _EPOCH + timedelta(milliseconds=millis)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def find_first_response(messages: Sequence[Message]) -> Message | None:
    """Get the first outbound (SENT) message of a thread."""
    for message in messages:
        if message.is_outbound:
            return message
    return None


def analyze_timing(messages: Sequence[Message] | None) -> Timing:
    """
    Compute when a thread was opened and first answered.

    Messages must be ordered oldest first. The first message marks the
    opening; the first outbound message is the support response. A thread
    opened by an outbound message answers itself, giving 0.0 hours.

    Args:
        messages: Thread messages, oldest first.

    Returns:
        Timing with ISO timestamps and response time in hours
        (2 decimals). Fields are None when they cannot be determined.
    """
    if not messages:
        return Timing()

    opened_ms = messages[0].internal_date_ms
    if opened_ms is None:
        return Timing()

    opened_at = format_timestamp(opened_ms)

    response = find_first_response(messages)
    if response is None or response.internal_date_ms is None:
        return Timing(opened_at=opened_at)

    responded_ms = response.internal_date_ms
    return Timing(
        opened_at=opened_at,
        responded_at=format_timestamp(responded_ms),
        response_hours=round2((responded_ms - opened_ms) / MS_PER_HOUR),
    )
