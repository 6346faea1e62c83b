import httpx
import pytest

from voicetwin import encoding
from voicetwin.client.api import ClientRequestError, InterviewApiClient


def _client(handler) -> InterviewApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return InterviewApiClient("http://testserver", http_client=http)


@pytest.mark.asyncio
async def test_ask_uploads_multipart_and_decodes_payload():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "question": "Q?",
                "answer": "Naïve answer",
                "audioUrl": encoding.encode("Naïve answer"),
                "sessionId": "s1",
            },
        )

    api = _client(handler)
    answer = await api.ask("s1", b"RIFFdata", "audio/wav")
    await api.http.aclose()

    assert answer.question == "Q?"
    assert answer.spoken_text == "Naïve answer"
    assert answer.session_id == "s1"
    body = seen[0].content
    assert seen[0].url.path == "/api/interview"
    assert b'name="audio"; filename="recording.wav"' in body
    assert b"RIFFdata" in body
    assert b'name="sessionId"' in body


@pytest.mark.asyncio
async def test_greeting_sends_action():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"question": None, "answer": "Hello!", "audioUrl": encoding.encode("Hello!")})

    api = _client(handler)
    greeting = await api.greeting("s1")
    await api.http.aclose()

    assert greeting.question is None
    assert greeting.spoken_text == "Hello!"
    assert b"action=greeting" in seen[0].content


@pytest.mark.asyncio
async def test_error_body_raises_with_server_message():
    api = _client(lambda request: httpx.Response(400, json={"error": "No audio file provided"}))

    with pytest.raises(ClientRequestError) as info:
        await api.ask("s1", b"", "audio/wav")
    await api.http.aclose()

    assert str(info.value) == "No audio file provided"


@pytest.mark.asyncio
async def test_transport_error_raises_client_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    api = _client(handler)
    with pytest.raises(ClientRequestError):
        await api.greeting("s1")
    await api.http.aclose()


@pytest.mark.asyncio
async def test_unreadable_payload_falls_back_to_answer_text():
    api = _client(lambda request: httpx.Response(200, json={"question": "Q", "answer": "plain", "audioUrl": "data:audio/mpeg;base64,AAAA"}))

    answer = await api.ask("s1", b"x", "audio/webm")
    await api.http.aclose()

    assert answer.spoken_text == "plain"
