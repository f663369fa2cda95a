"""Typed views over Gmail API payloads and derived per-thread records."""

from dataclasses import dataclass, field
from typing import Any

OUTBOUND_LABEL = "SENT"


@dataclass(frozen=True)
class Label:
    """A label from the account's label catalog."""

    id: str
    name: str
    type: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Label":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            type=data.get("type"),
        )


@dataclass(frozen=True)
class Header:
    name: str
    value: str


@dataclass(frozen=True)
class Message:
    """A single message inside a thread, reduced to what the KPIs need."""

    id: str
    label_ids: tuple[str, ...] = field(default_factory=tuple)
    internal_date_ms: int | None = None
    headers: tuple[Header, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Message":
        """
        Build a Message from a `users.threads.get` message entry.

        Missing fields fall back to empty values. An unparseable
        internalDate becomes None.
        """
        payload = data.get("payload") or {}
        headers = tuple(
            Header(name=h.get("name") or "", value=h.get("value") or "")
            for h in payload.get("headers") or []
        )

        try:
            internal_date = int(data.get("internalDate"))
        except (TypeError, ValueError):
            internal_date = None

        return cls(
            id=data.get("id") or "",
            label_ids=tuple(data.get("labelIds") or ()),
            internal_date_ms=internal_date,
            headers=headers,
        )

    @property
    def is_outbound(self) -> bool:
        return OUTBOUND_LABEL in self.label_ids


@dataclass(frozen=True)
class Conversation:
    """A thread: messages ordered oldest first, as Gmail returns them."""

    id: str
    messages: tuple[Message, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Conversation":
        return cls(
            id=data.get("id") or "",
            messages=tuple(Message.from_api(m) for m in data.get("messages") or []),
        )

    @property
    def label_ids(self) -> list[str]:
        """Union of the messages' label ids, in first-seen order."""
        seen: dict[str, None] = {}
        for message in self.messages:
            for label_id in message.label_ids:
                seen.setdefault(label_id, None)
        return list(seen)


@dataclass(frozen=True)
class ConversationRecord:
    """Per-thread classification and timing, consumed by the KPI rollup."""

    id: str
    sender: str
    sector: str
    resolved: bool = False
    open: bool = False
    in_progress: bool = False
    opened_at: str | None = None
    responded_at: str | None = None
    response_hours: float | None = None

    @property
    def is_disordered(self) -> bool:
        """True when the first response predates the opening message."""
        return self.response_hours is not None and self.response_hours < 0
