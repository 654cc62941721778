"""
Data structures (dataclasses) and error types for Voice Chat.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

VALID_ROLES = ("user", "assistant", "system")


def now_iso() -> str:
    return datetime.now().isoformat()


@dataclass
class ChatMessage:
    """A single chat turn."""
    role: str  # "user", "assistant" or "system"
    content: str
    timestamp: str = field(default_factory=now_iso)

    def to_api(self) -> dict:
        """Role/content pair as chat completion APIs expect it."""
        return {"role": self.role, "content": self.content}


@dataclass
class Conversation:
    """An ephemeral, in-memory conversation."""
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    messages: List[ChatMessage] = field(default_factory=list)

    def summary(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "message_count": len(self.messages),
        }


# --- ERRORS ---

class InvalidRequest(ValueError):
    """Request payload failed validation."""

    def __init__(self, message: str = "Invalid request format", details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class AIServiceError(RuntimeError):
    """A hosted AI provider call failed."""


class ProviderUnavailable(AIServiceError):
    """No API key configured for the requested provider."""


class EmptyReply(AIServiceError):
    """The chat provider answered with no text."""


class TranscriptionFailed(AIServiceError):
    """Speech-to-text produced an error or no text."""

    def __init__(self, error: str, detail: str):
        super().__init__(f"{error}: {detail}")
        self.error = error
        self.detail = detail
