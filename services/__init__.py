"""Services package for Voice Chat."""

from services.validation import (
    parse_messages,
    parse_chat_body,
    parse_messages_field,
)

from services.ai import (
    chat_completion,
    transcribe_audio,
    clean_response,
    provider_status,
)

from services.history import (
    history_enabled,
    record_exchange,
    get_conversation,
    list_conversations,
    group_by_date,
    export_conversation,
    clear_history,
)

from services.processing import (
    process_chat,
    process_voice_chat,
)

__all__ = [
    # Validation
    "parse_messages",
    "parse_chat_body",
    "parse_messages_field",
    # AI
    "chat_completion",
    "transcribe_audio",
    "clean_response",
    "provider_status",
    # History
    "history_enabled",
    "record_exchange",
    "get_conversation",
    "list_conversations",
    "group_by_date",
    "export_conversation",
    "clear_history",
    # Processing
    "process_chat",
    "process_voice_chat",
]
