from types import SimpleNamespace

import pytest

from services import ai, history, processing
from state import CONVERSATIONS


class FakeCompletions:
    """Stands in for `client.chat.completions` of the OpenAI-style SDKs."""

    def __init__(self, reply="Hello there.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeTranscriptions:
    """Stands in for `client.audio.transcriptions`."""

    def __init__(self, text="what is the weather", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class FakeClient:
    def __init__(self, reply="Hello there.", transcript="what is the weather", chat_error=None, audio_error=None):
        self.chat = SimpleNamespace(completions=FakeCompletions(reply, chat_error))
        self.audio = SimpleNamespace(transcriptions=FakeTranscriptions(transcript, audio_error))


@pytest.fixture(autouse=True)
def isolated(monkeypatch):
    """No real providers, history off and empty, uploads not saved."""
    for name in ("gemini_model", "deepseek_client", "openai_client", "groq_client"):
        monkeypatch.setattr(ai, name, None)
    monkeypatch.setattr(ai, "CHAT_PROVIDER", "auto")
    monkeypatch.setattr(ai, "TRANSCRIPTION_PROVIDER", "auto")
    monkeypatch.setattr(history, "CHAT_HISTORY_ENABLED", False)
    monkeypatch.setattr(processing, "SAVE_AUDIO_UPLOADS", False)
    CONVERSATIONS.clear()
    yield
    CONVERSATIONS.clear()


@pytest.fixture
def enable_history(monkeypatch):
    monkeypatch.setattr(history, "CHAT_HISTORY_ENABLED", True)


@pytest.fixture
def groq(monkeypatch):
    """Groq configured for both chat and transcription."""
    client = FakeClient()
    monkeypatch.setattr(ai, "groq_client", client)
    return client


@pytest.fixture
def client():
    from app import create_app

    flask_app = create_app()
    flask_app.config["TESTING"] = True
    return flask_app.test_client()
