"""
Request validation for chat message lists.
"""

import json
import logging
from typing import Any, List, Optional

from config import log_event
from models import ChatMessage, InvalidRequest, VALID_ROLES


def parse_messages(payload: Any) -> List[ChatMessage]:
    """
    Validate a list of {"role", "content"} objects.
    Raises InvalidRequest listing every problem found.
    """
    if not isinstance(payload, list):
        raise InvalidRequest(details=["messages: expected a list"])

    errors = []
    messages = []
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            errors.append(f"messages[{i}]: expected an object")
            continue

        role = item.get("role")
        content = item.get("content")
        if role not in VALID_ROLES:
            errors.append(f"messages[{i}].role: must be one of {', '.join(VALID_ROLES)}")
        if not isinstance(content, str):
            errors.append(f"messages[{i}].content: expected a string")
        if errors:
            continue

        timestamp = item.get("timestamp")
        if isinstance(timestamp, str) and timestamp:
            messages.append(ChatMessage(role=role, content=content, timestamp=timestamp))
        else:
            messages.append(ChatMessage(role=role, content=content))

    if errors:
        log_event(logging.WARNING, "invalid_messages", errors=len(errors), first=errors[0])
        raise InvalidRequest(details=errors)
    return messages


def parse_chat_body(body: Any) -> List[ChatMessage]:
    """Validate a /api/chat JSON body."""
    if not isinstance(body, dict) or "messages" not in body:
        raise InvalidRequest(details=["messages: required"])
    return parse_messages(body["messages"])


def parse_messages_field(raw: Optional[str]) -> List[ChatMessage]:
    """Validate the JSON-encoded `messages` form field sent with voice uploads."""
    if raw is None or not raw.strip():
        return []
    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise InvalidRequest(details=[f"messages: not valid JSON ({e})"])
    return parse_messages(payload)
