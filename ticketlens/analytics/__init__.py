"""Analytics module for support thread classification and KPIs."""

from .kpis import calculate_kpis, get_monthly_status_table, get_sector_breakdown
from .records import build_record, build_records
from .rules import IGNORED_LABELS, UNDEFINED_SECTOR, UNKNOWN_SENDER
from .sectors import Status, build_label_index, identify_sector, resolve_status
from .senders import extract_sender, sender_key
from .timing import Timing, analyze_timing

__all__ = [
    "IGNORED_LABELS",
    "UNDEFINED_SECTOR",
    "UNKNOWN_SENDER",
    "Status",
    "Timing",
    "analyze_timing",
    "build_label_index",
    "build_record",
    "build_records",
    "calculate_kpis",
    "extract_sender",
    "get_monthly_status_table",
    "get_sector_breakdown",
    "identify_sector",
    "resolve_status",
    "sender_key",
]
