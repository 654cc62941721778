from types import SimpleNamespace

import pytest

from config import SYSTEM_PROMPT
from models import AIServiceError, ChatMessage, ProviderUnavailable
from services import ai

from conftest import FakeClient


def test_clean_response_collapses_blank_lines_and_trims():
    raw = "\n1. First item.\n\n\n2. Second item.\n\nDone.  \n"
    assert ai.clean_response(raw) == "1. First item.\n2. Second item.\nDone."


def test_clean_response_handles_missing_text():
    assert ai.clean_response(None) == ""
    assert ai.clean_response("") == ""


def test_build_gemini_contents_maps_roles_and_extracts_system():
    messages = [
        ChatMessage(role="system", content="Answer in French."),
        ChatMessage(role="user", content="hi"),
        ChatMessage(role="assistant", content="bonjour"),
        ChatMessage(role="user", content="how are you"),
    ]

    contents, system_parts = ai.build_gemini_contents(messages)

    assert system_parts == ["Answer in French."]
    assert contents == [
        {"role": "user", "parts": ["hi"]},
        {"role": "model", "parts": ["bonjour"]},
        {"role": "user", "parts": ["how are you"]},
    ]


def test_resolve_chat_provider_prefers_first_configured(monkeypatch):
    assert ai.resolve_chat_provider() is None

    monkeypatch.setattr(ai, "groq_client", FakeClient())
    assert ai.resolve_chat_provider() == "groq"

    monkeypatch.setattr(ai, "deepseek_client", FakeClient())
    assert ai.resolve_chat_provider() == "deepseek"

    assert ai.resolve_chat_provider("groq") == "groq"
    assert ai.resolve_chat_provider("openai") is None
    assert ai.resolve_chat_provider("nonsense") is None


def test_named_provider_without_key_is_not_ready(monkeypatch):
    monkeypatch.setattr(ai, "groq_client", FakeClient())
    monkeypatch.setattr(ai, "CHAT_PROVIDER", "gemini")
    monkeypatch.setattr(ai, "TRANSCRIPTION_PROVIDER", "openai")

    assert ai.provider_status() == {"chat_provider": None, "transcription_provider": None}
    with pytest.raises(ProviderUnavailable):
        ai.chat_completion([ChatMessage(role="user", content="hello")])


def test_resolve_transcription_provider_prefers_groq(monkeypatch):
    monkeypatch.setattr(ai, "openai_client", FakeClient())
    assert ai.resolve_transcription_provider() == "openai"

    monkeypatch.setattr(ai, "groq_client", FakeClient())
    assert ai.resolve_transcription_provider() == "groq"


def test_chat_completion_sends_system_prompt_and_limits(monkeypatch):
    deepseek = FakeClient(reply="Sure.")
    monkeypatch.setattr(ai, "deepseek_client", deepseek)

    reply = ai.chat_completion([ChatMessage(role="user", content="hello")])

    assert reply == "Sure."
    call = deepseek.chat.completions.calls[0]
    assert call["model"] == ai.DEEPSEEK_CHAT_MODEL
    assert call["messages"] == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "hello"},
    ]
    assert call["temperature"] == 0.7
    assert call["max_tokens"] == 500
    assert call["stream"] is False


def test_chat_completion_without_provider_raises():
    with pytest.raises(ProviderUnavailable):
        ai.chat_completion([ChatMessage(role="user", content="hello")])


def test_chat_completion_wraps_sdk_errors(monkeypatch):
    class RateLimited(Exception):
        message = "Rate limit reached"

    monkeypatch.setattr(ai, "openai_client", FakeClient(chat_error=RateLimited("429")))

    with pytest.raises(AIServiceError) as excinfo:
        ai.chat_completion([ChatMessage(role="user", content="hello")], provider="openai")
    assert str(excinfo.value) == "Rate limit reached"


def test_chat_completion_empty_choices_returns_empty(monkeypatch):
    client = FakeClient()
    client.chat.completions.create = lambda **kwargs: SimpleNamespace(choices=[])
    monkeypatch.setattr(ai, "groq_client", client)

    assert ai.chat_completion([ChatMessage(role="user", content="hello")]) == ""


def test_gemini_completion_uses_model_roles(monkeypatch):
    captured = {}

    class FakeGemini:
        model_name = "models/gemini-test"

        def generate_content(self, contents, generation_config=None):
            captured["contents"] = contents
            captured["generation_config"] = generation_config
            return SimpleNamespace(text="Hi!")

    monkeypatch.setattr(ai, "gemini_model", FakeGemini())

    reply = ai.chat_completion([
        ChatMessage(role="user", content="hello"),
        ChatMessage(role="assistant", content="hey"),
        ChatMessage(role="user", content="again"),
    ])

    assert reply == "Hi!"
    assert [c["role"] for c in captured["contents"]] == ["user", "model", "user"]
    assert captured["generation_config"] == {"temperature": 0.7, "max_output_tokens": 500}


def test_gemini_blocked_response_is_empty(monkeypatch):
    class Blocked:
        @property
        def text(self):
            raise ValueError("no parts")

    class FakeGemini:
        model_name = "models/gemini-test"

        def generate_content(self, contents, generation_config=None):
            return Blocked()

    monkeypatch.setattr(ai, "gemini_model", FakeGemini())

    assert ai.chat_completion([ChatMessage(role="user", content="hello")]) == ""


def test_transcribe_audio_uses_whisper(groq):
    groq.audio.transcriptions.text = "  turn on the lights \n"

    text = ai.transcribe_audio(b"\x1a\x45" * 200, "clip.webm")

    assert text == "turn on the lights"
    call = groq.audio.transcriptions.calls[0]
    assert call["model"] == ai.GROQ_WHISPER_MODEL
    assert call["language"] == ai.TRANSCRIPTION_LANGUAGE
    assert call["file"].name == "clip.webm"
    assert call["file"].getvalue() == b"\x1a\x45" * 200


def test_transcribe_audio_accepts_plain_text_response(monkeypatch):
    client = FakeClient()
    client.audio.transcriptions.create = lambda **kwargs: "plain text\n"
    monkeypatch.setattr(ai, "openai_client", client)

    assert ai.transcribe_audio(b"0" * 200) == "plain text"


def test_transcribe_audio_wraps_errors(monkeypatch):
    monkeypatch.setattr(ai, "groq_client", FakeClient(audio_error=RuntimeError("file too short")))

    with pytest.raises(AIServiceError, match="file too short"):
        ai.transcribe_audio(b"0" * 200)


def test_transcribe_audio_without_provider_raises():
    with pytest.raises(ProviderUnavailable):
        ai.transcribe_audio(b"0" * 200)
