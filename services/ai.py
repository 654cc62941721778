"""
AI operations: chat completion and Whisper transcription over hosted providers.
"""

import io
import re
import logging
from typing import Dict, List, Optional, Tuple

import google.generativeai as genai

from config import (
    log_event,
    SYSTEM_PROMPT,
    MAX_TOKENS,
    TEMPERATURE,
    TRANSCRIPTION_LANGUAGE,
    CHAT_PROVIDER,
    CHAT_PROVIDERS,
    TRANSCRIPTION_PROVIDER,
    TRANSCRIPTION_PROVIDERS,
    DEEPSEEK_CHAT_MODEL,
    OPENAI_CHAT_MODEL,
    GROQ_CHAT_MODEL,
    GROQ_WHISPER_MODEL,
    OPENAI_WHISPER_MODEL,
    gemini_model,
    groq_client,
    openai_client,
    deepseek_client,
)
from models import ChatMessage, AIServiceError, ProviderUnavailable


# --- PROVIDER SELECTION ---

def _chat_clients() -> Dict[str, object]:
    return {
        "gemini": gemini_model,
        "deepseek": deepseek_client,
        "openai": openai_client,
        "groq": groq_client,
    }


def _transcription_clients() -> Dict[str, object]:
    return {"groq": groq_client, "openai": openai_client}


def _pick(preferred: str, order, clients: Dict[str, object]) -> Optional[str]:
    if preferred != "auto":
        # A named provider only counts once its key is configured
        return preferred if preferred in order and clients.get(preferred) is not None else None
    return next((name for name in order if clients.get(name) is not None), None)


def resolve_chat_provider(preferred: Optional[str] = None) -> Optional[str]:
    """Explicit setting wins, otherwise the first provider with a key."""
    return _pick(preferred or CHAT_PROVIDER, CHAT_PROVIDERS, _chat_clients())


def resolve_transcription_provider(preferred: Optional[str] = None) -> Optional[str]:
    """Explicit setting wins, otherwise the first provider with a key."""
    return _pick(
        preferred or TRANSCRIPTION_PROVIDER, TRANSCRIPTION_PROVIDERS, _transcription_clients()
    )


def provider_status() -> Dict[str, Optional[str]]:
    """Readiness summary for /health and the startup banner."""
    return {
        "chat_provider": resolve_chat_provider(),
        "transcription_provider": resolve_transcription_provider(),
    }


def error_message(error: Exception, default: str) -> str:
    """Best human-readable message from an SDK exception."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or default


# --- RESPONSE CLEANING ---

def clean_response(text: Optional[str]) -> str:
    """Collapse runs of blank lines and trim."""
    if not text:
        return ""
    return re.sub(r"\n{2,}", "\n", text).strip()


# --- CHAT COMPLETION ---

def build_gemini_contents(messages: List[ChatMessage]) -> Tuple[List[Dict], List[str]]:
    """
    Map chat messages onto Gemini's content format.
    Returns (contents, extra_system_instructions).
    """
    contents = []
    system_parts = []
    for message in messages:
        if message.role == "system":
            system_parts.append(message.content)
            continue
        role = "model" if message.role == "assistant" else "user"
        contents.append({"role": role, "parts": [message.content]})
    return contents, system_parts


def _gemini_completion(messages: List[ChatMessage]) -> str:
    contents, system_parts = build_gemini_contents(messages)
    model = gemini_model
    if system_parts:
        model = genai.GenerativeModel(
            gemini_model.model_name,
            system_instruction="\n\n".join([SYSTEM_PROMPT] + system_parts),
        )

    response = model.generate_content(
        contents,
        generation_config={"temperature": TEMPERATURE, "max_output_tokens": MAX_TOKENS},
    )
    try:
        return response.text or ""
    except ValueError:
        # No candidate parts (blocked or truncated response)
        log_event(logging.WARNING, "gemini_no_text")
        return ""


def _openai_style_completion(client, model: str, messages: List[ChatMessage]) -> str:
    completion = client.chat.completions.create(
        model=model,
        messages=[{"role": "system", "content": SYSTEM_PROMPT}] + [m.to_api() for m in messages],
        temperature=TEMPERATURE,
        max_tokens=MAX_TOKENS,
        stream=False,
    )
    if not completion.choices:
        return ""
    return completion.choices[0].message.content or ""


def chat_completion(messages: List[ChatMessage], provider: Optional[str] = None) -> str:
    """
    Send the conversation to the configured chat provider.
    Returns the raw reply text, which may be empty.
    """
    name = resolve_chat_provider(provider)
    client = _chat_clients().get(name) if name else None
    if client is None:
        log_event(logging.WARNING, "chat_provider_unavailable", provider=name or CHAT_PROVIDER)
        raise ProviderUnavailable("No chat provider is configured")

    log_event(logging.INFO, "chat_request", provider=name, messages=len(messages))
    try:
        if name == "gemini":
            reply = _gemini_completion(messages)
        else:
            model = {
                "deepseek": DEEPSEEK_CHAT_MODEL,
                "openai": OPENAI_CHAT_MODEL,
                "groq": GROQ_CHAT_MODEL,
            }[name]
            reply = _openai_style_completion(client, model, messages)
    except Exception as e:
        log_event(logging.ERROR, "chat_error", provider=name, error=str(e))
        raise AIServiceError(error_message(e, "Unknown chat completion error")) from e

    log_event(logging.INFO, "chat_reply", provider=name, chars=len(reply))
    return reply


# --- AUDIO TRANSCRIPTION ---

def transcribe_audio(
    audio_data: bytes,
    filename: str = "recording.webm",
    provider: Optional[str] = None,
) -> str:
    """Transcribe audio using a hosted Whisper model."""
    name = resolve_transcription_provider(provider)
    client = _transcription_clients().get(name) if name else None
    if client is None:
        log_event(logging.WARNING, "transcription_provider_unavailable", provider=name or TRANSCRIPTION_PROVIDER)
        raise ProviderUnavailable("No transcription provider is configured")

    audio_file = io.BytesIO(audio_data)
    audio_file.name = filename or "recording.webm"
    model = GROQ_WHISPER_MODEL if name == "groq" else OPENAI_WHISPER_MODEL

    log_event(logging.INFO, "transcription_request", provider=name, model=model, bytes=len(audio_data))
    try:
        transcription = client.audio.transcriptions.create(
            file=audio_file,
            model=model,
            language=TRANSCRIPTION_LANGUAGE,
        )
    except Exception as e:
        log_event(logging.ERROR, "transcription_error", provider=name, error=str(e))
        raise AIServiceError(error_message(e, "Unknown transcription error")) from e

    text = getattr(transcription, "text", transcription)
    text = text.strip() if isinstance(text, str) else ""
    log_event(logging.INFO, "audio_transcribed", provider=name, chars=len(text))
    return text
