"""
Main chat processing logic: text chat and the voice -> transcription -> chat round trip.
"""

import os
import time
import logging
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from config import log_event, MIN_AUDIO_BYTES, SAVE_AUDIO_UPLOADS, AUDIO_UPLOAD_DIRNAME
from models import ChatMessage, EmptyReply, InvalidRequest, TranscriptionFailed, AIServiceError
from services.ai import chat_completion, clean_response, transcribe_audio
from services.history import record_exchange


# --- HISTORY ---

def remember_exchange(
    conversation_id: Optional[str],
    sent: List[ChatMessage],
    reply: ChatMessage,
) -> Optional[str]:
    """
    Store the exchange in the in-memory history.
    A known conversation only gets the newest user turn; a new one gets everything sent.
    The known/new decision is made under the history lock.
    """
    conversation = record_exchange(conversation_id, sent[-1:] + [reply], earlier=sent[:-1])
    return conversation.id if conversation else None


# --- TEXT CHAT ---

def process_chat(messages: List[ChatMessage], conversation_id: Optional[str] = None) -> Dict:
    """
    Send the conversation to the chat provider and return the cleaned reply.
    Raises EmptyReply when the provider answers with nothing.
    """
    log_event(logging.INFO, "chat_received", messages=len(messages), conversation_id=conversation_id)

    reply = clean_response(chat_completion(messages))
    if not reply:
        log_event(logging.ERROR, "chat_empty_reply")
        raise EmptyReply("Empty response from AI")

    result = {"response": reply}
    stored_id = remember_exchange(conversation_id, messages, ChatMessage(role="assistant", content=reply))
    if stored_id:
        result["conversation_id"] = stored_id
    return result


# --- VOICE CHAT ---

def save_upload(audio_data: bytes, filename: str) -> Optional[Path]:
    """Keep a copy of the upload for inspection. Failures are logged and ignored."""
    temp_dir = Path(tempfile.gettempdir()) / AUDIO_UPLOAD_DIRNAME
    safe_name = os.path.basename(filename or "recording.webm")
    path = temp_dir / f"upload_{int(time.time() * 1000)}_{safe_name}"
    try:
        temp_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(audio_data)
    except OSError as e:
        log_event(logging.ERROR, "audio_save_failed", path=str(path), error=str(e))
        return None
    log_event(logging.INFO, "audio_saved", path=str(path))
    return path


def process_voice_chat(
    audio_data: Optional[bytes],
    filename: str,
    prev_messages: List[ChatMessage],
    conversation_id: Optional[str] = None,
) -> Dict:
    """
    Transcribe the recording, then answer it as the next user turn.
    Chat failures degrade into an error reply; transcription failures raise TranscriptionFailed.
    """
    if not audio_data or len(audio_data) < MIN_AUDIO_BYTES:
        log_event(logging.WARNING, "voice_audio_missing", bytes=len(audio_data or b""))
        raise InvalidRequest("No valid audio file received")

    log_event(logging.INFO, "voice_received", bytes=len(audio_data), filename=filename, history=len(prev_messages))

    if SAVE_AUDIO_UPLOADS:
        save_upload(audio_data, filename)

    # Step 1: Transcribe
    try:
        transcription = transcribe_audio(audio_data, filename)
    except AIServiceError as e:
        raise TranscriptionFailed("Failed to transcribe audio", str(e)) from e

    if not transcription:
        log_event(logging.ERROR, "transcription_empty")
        raise TranscriptionFailed(
            "Failed to get valid transcription from audio",
            "Whisper returned empty text.",
        )

    # Step 2: Answer the transcription
    messages = list(prev_messages) + [ChatMessage(role="user", content=transcription)]
    try:
        reply = clean_response(chat_completion(messages))
    except AIServiceError as e:
        log_event(logging.ERROR, "voice_chat_reply_failed", error=str(e))
        reply = f"(Error getting AI reply: {e})"

    # Step 3: Record the turn the client will show
    reply = reply or "(AI did not provide a reply)"
    result = {"transcription": transcription, "reply": reply}

    stored_id = remember_exchange(conversation_id, messages, ChatMessage(role="assistant", content=reply))
    if stored_id:
        result["conversation_id"] = stored_id
    log_event(logging.INFO, "voice_chat_complete", chars=len(reply), conversation_id=stored_id)
    return result
