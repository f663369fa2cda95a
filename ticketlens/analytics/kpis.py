"""KPI rollup over per-thread records."""

import math
from collections import defaultdict
from typing import Any, Sequence

from ticketlens.models import ConversationRecord

from .senders import sender_key
from .timing import round2

# Quarterly averages always divide by the full quarter length, so quarters
# with data for only some months read low.
MONTHS_PER_QUARTER = 3


def _month_of(opened_at: str | None) -> tuple[str, int] | None:
    """Get ("YYYY-MM", month number) from an ISO timestamp, or None if malformed."""
    if not opened_at or len(opened_at) < 7:
        return None

    month_key = opened_at[:7]
    try:
        month = int(opened_at[5:7])
    except ValueError:
        return None

    if not 1 <= month <= 12:
        return None
    return month_key, month


def quarter_key(month_key: str, month: int) -> str:
    """Build "YYYY-Qn" for a month."""
    return f"{month_key[:4]}-Q{math.ceil(month / MONTHS_PER_QUARTER)}"


def calculate_kpis(records: Sequence[ConversationRecord]) -> dict[str, Any]:
    """
    Aggregate thread records into the KPI report.

    Args:
        records: One ConversationRecord per thread.

    Returns:
        Dictionary with:
        - totalConversations: number of threads
        - conversationsBySector: count per sector
        - conversationsBySender: count per sender address
        - conversationsByStatus: resolved / open / inProgress counts over all threads
        - conversationsByMonth: count per YYYY-MM of opening
        - resolvedByMonth / openByMonth / inProgressByMonth: status counts per month
        - quarterlyAverage: YYYY-Qn -> threads in quarter / 3
        - averageResponseHours: mean first-response time, 0 if none
        - disorderedConversations: ids whose response precedes the opening
    """
    by_sector: dict[str, int] = defaultdict(int)
    by_sender: dict[str, int] = defaultdict(int)
    by_month: dict[str, int] = defaultdict(int)
    resolved_by_month: dict[str, int] = defaultdict(int)
    open_by_month: dict[str, int] = defaultdict(int)
    in_progress_by_month: dict[str, int] = defaultdict(int)
    quarters: dict[str, dict] = defaultdict(lambda: {"total": 0, "months": set()})
    by_status = {"resolved": 0, "open": 0, "inProgress": 0}
    disordered = []

    response_sum = 0.0
    response_count = 0

    for record in records:
        by_sector[record.sector] += 1

        if record.resolved:
            by_status["resolved"] += 1
        if record.open:
            by_status["open"] += 1
        if record.in_progress:
            by_status["inProgress"] += 1

        if record.sender:
            by_sender[sender_key(record.sender)] += 1

        month = _month_of(record.opened_at)
        if month:
            month_key, month_number = month
            by_month[month_key] += 1

            if record.resolved:
                resolved_by_month[month_key] += 1
            if record.open:
                open_by_month[month_key] += 1
            if record.in_progress:
                in_progress_by_month[month_key] += 1

            quarter = quarters[quarter_key(month_key, month_number)]
            quarter["total"] += 1
            quarter["months"].add(month_key)

        if record.response_hours is not None:
            response_sum += record.response_hours
            response_count += 1
            if record.is_disordered:
                disordered.append(record.id)

    quarterly_average = {
        key: round2(data["total"] / MONTHS_PER_QUARTER)
        for key, data in quarters.items()
    }

    average_response = (
        round2(response_sum / response_count) if response_count > 0 else 0
    )

    return {
        "totalConversations": len(records),
        "conversationsBySector": dict(by_sector),
        "conversationsBySender": dict(by_sender),
        "conversationsByStatus": by_status,
        "conversationsByMonth": dict(by_month),
        "quarterlyAverage": quarterly_average,
        "resolvedByMonth": dict(resolved_by_month),
        "openByMonth": dict(open_by_month),
        "inProgressByMonth": dict(in_progress_by_month),
        "averageResponseHours": average_response,
        "disorderedConversations": disordered,
    }


def get_sector_breakdown(report: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Get sectors sorted by volume with their share of all threads.

    Returns:
        List of dicts with sector, count and percentage.
    """
    total = report.get("totalConversations", 0)
    rows = [
        {
            "sector": sector,
            "count": count,
            "percentage": round((count / total) * 100, 1) if total > 0 else 0.0,
        }
        for sector, count in report.get("conversationsBySector", {}).items()
    ]
    return sorted(rows, key=lambda x: (-x["count"], x["sector"]))


def get_monthly_status_table(report: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Get one row per month with total and per-status counts, oldest first.
    """
    rows = []
    for month in sorted(report.get("conversationsByMonth", {})):
        rows.append(
            {
                "month": month,
                "total": report["conversationsByMonth"][month],
                "resolved": report.get("resolvedByMonth", {}).get(month, 0),
                "open": report.get("openByMonth", {}).get(month, 0),
                "in_progress": report.get("inProgressByMonth", {}).get(month, 0),
            }
        )
    return rows
