"""Department and status classification from thread labels."""

import re
from dataclasses import dataclass
from typing import Iterable

from ticketlens.models import Label

from .rules import IGNORED_LABELS, UNDEFINED_SECTOR, get_sector_prefix, get_status_labels


@dataclass(frozen=True)
class Status:
    """Status flags. Independent: a thread may carry several or none."""

    resolved: bool = False
    open: bool = False
    in_progress: bool = False


def build_label_index(catalog: Iterable[Label]) -> dict[str, Label]:
    """Index a label catalog by label id."""
    return {label.id: label for label in catalog}


def _as_index(catalog: Iterable[Label] | dict[str, Label]) -> dict[str, Label]:
    if isinstance(catalog, dict):
        return catalog
    return build_label_index(catalog)


def identify_sector(
    label_ids: Iterable[str] | None,
    catalog: Iterable[Label] | dict[str, Label],
    prefix: str | None = None,
) -> str:
    """
    Resolve the department (sector) a thread belongs to.

    The first non-reserved label whose name starts with the department
    prefix (case-insensitive) wins. The prefix and the whitespace after it
    are stripped, so "Setor Financeiro" becomes "Financeiro". A label that is
    only the prefix names no department and is skipped.

    Args:
        label_ids: Label ids attached to the thread, in order.
        catalog: Label catalog, as a list or an id index.
        prefix: Department prefix. Defaults to SECTOR_PREFIX env var.

    Returns:
        Sector name, or "Undefined" when no department label is present.
    """
    if not label_ids:
        return UNDEFINED_SECTOR

    if prefix is None:
        prefix = get_sector_prefix()

    index = _as_index(catalog)
    prefix_upper = prefix.upper()
    strip_pattern = re.compile(rf"^{re.escape(prefix)}\s*", re.IGNORECASE)

    for label_id in label_ids:
        if label_id in IGNORED_LABELS:
            continue

        label = index.get(label_id)
        if label is None:
            continue

        if label.name.upper().startswith(prefix_upper):
            sector = strip_pattern.sub("", label.name, count=1).strip()
            if sector:
                return sector

    return UNDEFINED_SECTOR


def resolve_status(
    label_ids: Iterable[str] | None,
    catalog: Iterable[Label] | dict[str, Label],
) -> Status:
    """
    Determine resolved/open/in-progress flags from status labels.

    Status labels match on the whole name (case-insensitive), not a prefix.
    """
    if not label_ids:
        return Status()

    index = _as_index(catalog)
    status_labels = get_status_labels()
    flags = {"resolved": False, "open": False, "in_progress": False}

    for label_id in label_ids:
        label = index.get(label_id)
        if label is None:
            continue

        name = label.name.upper()
        for field_name, status_name in status_labels.items():
            if name == status_name:
                flags[field_name] = True

    return Status(**flags)
