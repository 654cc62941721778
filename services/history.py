"""
Ephemeral in-memory conversation history.
Off unless CHAT_HISTORY_ENABLED is set; lost on restart either way.
"""

import uuid
import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from config import log_event, CHAT_HISTORY_ENABLED, MAX_CONVERSATIONS, TITLE_MAX_CHARS
from models import ChatMessage, Conversation
from state import CONVERSATIONS, HISTORY_LOCK

DATE_GROUPS = ("Today", "Yesterday", "Previous 7 Days", "This Month", "Older")


def history_enabled() -> bool:
    return CHAT_HISTORY_ENABLED


def make_title(messages: Iterable[ChatMessage]) -> str:
    """Title from the first user message."""
    first = next((m.content.strip() for m in messages if m.role == "user" and m.content.strip()), "")
    if not first:
        return "New Chat"
    first = " ".join(first.split())
    if len(first) > TITLE_MAX_CHARS:
        return first[:TITLE_MAX_CHARS].rstrip() + "..."
    return first


def record_exchange(
    conversation_id: Optional[str],
    new_messages: List[ChatMessage],
    earlier: Optional[List[ChatMessage]] = None,
) -> Optional[Conversation]:
    """
    Append messages to a conversation, creating it when the id is unknown.
    `earlier` is the context the client already holds; it is stored only when
    the conversation has to be created (new, or evicted since the last turn).
    Returns None when history is disabled.
    """
    if not history_enabled():
        return None

    now = datetime.now()
    with HISTORY_LOCK:
        conversation = CONVERSATIONS.get(conversation_id) if conversation_id else None
        if conversation is None:
            new_messages = list(earlier or []) + list(new_messages)
            conversation = Conversation(
                id=conversation_id or str(uuid.uuid4())[:8],
                title=make_title(new_messages),
                created_at=now,
                updated_at=now,
            )
            CONVERSATIONS[conversation.id] = conversation
            log_event(logging.INFO, "conversation_created", conversation_id=conversation.id)

        conversation.messages.extend(new_messages)
        conversation.updated_at = now
        if conversation.title == "New Chat":
            conversation.title = make_title(conversation.messages)
        CONVERSATIONS.move_to_end(conversation.id)

        # Keep the most recently updated conversations
        while len(CONVERSATIONS) > MAX_CONVERSATIONS:
            evicted_id, _ = CONVERSATIONS.popitem(last=False)
            log_event(logging.INFO, "conversation_evicted", conversation_id=evicted_id)

    log_event(
        logging.DEBUG,
        "conversation_updated",
        conversation_id=conversation.id,
        messages=len(conversation.messages),
    )
    return conversation


def get_conversation(conversation_id: str) -> Optional[Conversation]:
    with HISTORY_LOCK:
        return CONVERSATIONS.get(conversation_id)


def list_conversations() -> List[Conversation]:
    """All conversations, newest first."""
    with HISTORY_LOCK:
        conversations = list(CONVERSATIONS.values())
    return sorted(conversations, key=lambda c: c.updated_at, reverse=True)


def clear_history():
    with HISTORY_LOCK:
        count = len(CONVERSATIONS)
        CONVERSATIONS.clear()
    log_event(logging.INFO, "history_cleared", conversations=count)


def group_by_date(conversations: Iterable[Conversation], now: Optional[datetime] = None) -> Dict[str, List[Conversation]]:
    """
    Bucket conversations by last update for the sidebar.
    Buckets come back in display order; empty ones are left out.
    """
    now = now or datetime.now()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    yesterday_start = today_start - timedelta(days=1)
    last_7_days_start = today_start - timedelta(days=7)
    month_start = today_start.replace(day=1)

    groups: Dict[str, List[Conversation]] = {}
    for conversation in sorted(conversations, key=lambda c: c.updated_at, reverse=True):
        updated = conversation.updated_at
        if updated >= today_start:
            name = "Today"
        elif updated >= yesterday_start:
            name = "Yesterday"
        elif updated >= last_7_days_start:
            name = "Previous 7 Days"
        elif updated >= month_start:
            name = "This Month"
        else:
            name = "Older"
        groups.setdefault(name, []).append(conversation)

    return {name: groups[name] for name in DATE_GROUPS if name in groups}


def export_conversation(conversation: Conversation) -> str:
    """Plain-text transcript for download."""
    lines = [conversation.title, f"Started {conversation.created_at:%Y-%m-%d %H:%M}", ""]
    for message in conversation.messages:
        if message.role == "system":
            continue
        speaker = "You" if message.role == "user" else "AI"
        lines.append(f"{speaker}: {message.content}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"
