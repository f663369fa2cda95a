"""JSON and CSV exports of KPI reports and thread records."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from ticketlens.models import ConversationRecord

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

CSV_COLUMNS = {
    "id": "Thread Id",
    "sender": "Sender",
    "sector": "Sector",
    "resolved": "Closed",
    "open": "Open",
    "in_progress": "In Progress",
    "opened_at": "Opened At",
    "responded_at": "First Response",
    "response_hours": "Response Hours",
}


def get_yes_no_labels() -> tuple[str, str]:
    """Get the localized yes/no strings used for status columns."""
    return os.getenv("EXPORT_YES", "Sim"), os.getenv("EXPORT_NO", "Não")


def export_kpis_to_json(report: dict[str, Any], path: str | Path) -> Path:
    """
    Write the KPI report as indented JSON.

    Returns:
        The written path.
    """
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    logger.info("Wrote KPI report to %s", path)
    return path


def records_to_dataframe(records: Sequence[ConversationRecord]) -> pd.DataFrame:
    """
    Build the per-thread export table.

    Status flags become localized yes/no strings and missing values "N/A".
    """
    yes, no = get_yes_no_labels()

    rows = []
    for record in records:
        rows.append(
            {
                "id": record.id,
                "sender": record.sender or NOT_AVAILABLE,
                "sector": record.sector,
                "resolved": yes if record.resolved else no,
                "open": yes if record.open else no,
                "in_progress": yes if record.in_progress else no,
                "opened_at": record.opened_at or NOT_AVAILABLE,
                "responded_at": record.responded_at or NOT_AVAILABLE,
                "response_hours": (
                    record.response_hours
                    if record.response_hours is not None
                    else NOT_AVAILABLE
                ),
            }
        )

    df = pd.DataFrame(rows, columns=list(CSV_COLUMNS))
    return df.rename(columns=CSV_COLUMNS)


def export_records_to_csv(
    records: Sequence[ConversationRecord], path: str | Path
) -> Path:
    """
    Write one CSV row per thread.

    Returns:
        The written path.
    """
    path = Path(path)
    records_to_dataframe(records).to_csv(path, index=False, encoding="utf-8")

    logger.info("Wrote %d thread rows to %s", len(records), path)
    return path
