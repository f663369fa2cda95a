"""Per-thread record construction."""

import logging
from typing import Iterable, Sequence

from ticketlens.models import Conversation, ConversationRecord, Label, Message

from .sectors import build_label_index, identify_sector, resolve_status
from .senders import extract_sender
from .timing import analyze_timing

logger = logging.getLogger(__name__)


def build_record(
    conversation_id: str,
    label_ids: Sequence[str] | None,
    catalog: Iterable[Label] | dict[str, Label],
    messages: Sequence[Message] | None,
) -> ConversationRecord:
    """
    Classify and time a single thread.

    Args:
        conversation_id: Thread id.
        label_ids: Labels attached to the thread, in order. None derives
            them from the messages.
        catalog: Label catalog, as a list or an id index.
        messages: Thread messages, oldest first.

    Returns:
        The thread's ConversationRecord.
    """
    if label_ids is None:
        label_ids = Conversation(conversation_id, tuple(messages or ())).label_ids

    index = catalog if isinstance(catalog, dict) else build_label_index(catalog)
    status = resolve_status(label_ids, index)
    timing = analyze_timing(messages)

    record = ConversationRecord(
        id=conversation_id,
        sender=extract_sender(messages),
        sector=identify_sector(label_ids, index),
        resolved=status.resolved,
        open=status.open,
        in_progress=status.in_progress,
        opened_at=timing.opened_at,
        responded_at=timing.responded_at,
        response_hours=timing.response_hours,
    )

    if record.is_disordered:
        logger.warning(
            "Thread %s: first response precedes opening message (%.2f h)",
            conversation_id,
            record.response_hours,
        )

    return record


def build_records(
    conversations: Iterable[Conversation],
    catalog: Iterable[Label],
) -> list[ConversationRecord]:
    """Build one record per thread, sharing a single label index."""
    index = build_label_index(catalog)
    return [
        build_record(conv.id, conv.label_ids, index, conv.messages)
        for conv in conversations
    ]
