import pytest
from fastapi.testclient import TestClient

from conftest import FakeGenerator, FakeSpeechProvider
from voicetwin import encoding
from voicetwin.conversation.engine import ConversationEngine
from voicetwin.main import app, get_orchestrator, get_session_store
from voicetwin.orchestrator import RequestOrchestrator
from voicetwin.services.transcription_service import TranscriptionGateway


@pytest.fixture
def speech() -> FakeSpeechProvider:
    return FakeSpeechProvider()


@pytest.fixture
def client(store, persona, speech):
    orchestrator = RequestOrchestrator(
        transcription=TranscriptionGateway(speech),
        conversation=ConversationEngine(store, FakeGenerator(), persona),
    )
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_session_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "voicetwin"}


def test_greeting_over_http(client, store, persona):
    response = client.post("/api/interview", data={"action": "greeting", "sessionId": "s1"})

    assert response.status_code == 200
    body = response.json()
    assert body["question"] is None
    assert body["answer"] == persona.greeting
    assert encoding.decode(body["audioUrl"]) == persona.greeting
    assert len(store.get("s1")) == 2


def test_audio_upload_over_http(client, store, speech):
    client.post("/api/interview", data={"action": "greeting", "sessionId": "s1"})

    response = client.post(
        "/api/interview",
        data={"sessionId": "s1"},
        files={"audio": ("recording.webm", b"\x1a\x45\xdf\xa3", "audio/webm")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body == {
        "question": "What's your #1 superpower?",
        "answer": "I learn fast and ship.",
        "audioUrl": encoding.encode("I learn fast and ship."),
        "sessionId": "s1",
    }
    assert speech.calls == [(b"\x1a\x45\xdf\xa3", "audio/webm")]
    assert len(store.get("s1")) == 4


def test_missing_audio_is_400(client, store):
    response = client.post("/api/interview", data={"sessionId": "s2"})

    assert response.status_code == 400
    assert response.json() == {"error": "No audio file provided"}
    assert "s2" not in store


def test_non_exact_greeting_action_needs_audio(client, store):
    response = client.post("/api/interview", data={"action": "GREETING", "sessionId": "g2"})

    assert response.status_code == 400
    assert response.json() == {"error": "No audio file provided"}
    assert "g2" not in store


def test_empty_transcript_is_500(client, store, speech):
    speech.text = ""
    response = client.post(
        "/api/interview",
        data={"sessionId": "s3"},
        files={"audio": ("recording.webm", b"quiet", "audio/webm")},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "No text transcribed from audio"}
    assert "s3" not in store


def test_history_endpoint(client):
    assert client.get("/api/interview/nope/history").status_code == 404

    client.post("/api/interview", data={"action": "greeting", "sessionId": "h1"})
    response = client.get("/api/interview/h1/history")

    assert response.status_code == 200
    body = response.json()
    assert body["sessionId"] == "h1"
    assert [t["role"] for t in body["turns"]] == ["user", "model"]
