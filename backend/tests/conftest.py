import os
import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# config is read at import time
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("ASSEMBLYAI_API_KEY", "test-key")

from voicetwin.errors import TranscriptionError  # noqa: E402
from voicetwin.models import GenerationConfig, Role, Turn  # noqa: E402
from voicetwin.persona import PersonaConfig  # noqa: E402
from voicetwin.session.store import InMemorySessionStore  # noqa: E402


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("ASSEMBLYAI_API_KEY", "test-key")


class FakeGenerator:
    def __init__(self, reply="I learn fast and ship.", error: Exception | None = None, delay: float = 0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls: list[tuple[list[Turn], str, GenerationConfig]] = []

    async def generate(self, history, question, config):
        import asyncio

        self.calls.append((list(history), question, config))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if callable(self.reply):
            return self.reply(question)
        return self.reply


class FakeSpeechProvider:
    name = "fake"

    def __init__(self, text="What's your #1 superpower?", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[bytes, str]] = []

    async def recognize(self, audio, mime_type):
        self.calls.append((audio, mime_type))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def persona() -> PersonaConfig:
    return PersonaConfig(persona_text="You are Ada, a backend engineer.")


@pytest.fixture
def store(persona) -> InMemorySessionStore:
    return InMemorySessionStore(persona.priming_pair())


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def speech_provider() -> FakeSpeechProvider:
    return FakeSpeechProvider()


@pytest.fixture
def failing_speech_provider() -> FakeSpeechProvider:
    return FakeSpeechProvider(error=TranscriptionError("Transcription failed"))


def turn(role: str, text: str) -> Turn:
    return Turn(role=Role(role), text=text)
