from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx

from voicetwin import encoding
from voicetwin.errors import EncodingError

logger = logging.getLogger("voicetwin.client.api")


class ClientRequestError(RuntimeError):
    """The interview endpoint could not produce an answer."""


@dataclass
class InterviewAnswer:
    question: str | None
    answer: str
    spoken_text: str
    session_id: str | None = None


class InterviewApiClient:
    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        timeout_sec: float = 90.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))
        self._owns_client = http_client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http.aclose()

    async def greeting(self, session_id: str) -> InterviewAnswer:
        return await self._post(data={"action": "greeting", "sessionId": session_id})

    async def ask(self, session_id: str, audio: bytes, mime_type: str = "audio/wav") -> InterviewAnswer:
        filename = "recording.wav" if "wav" in mime_type else "recording.webm"
        return await self._post(
            data={"sessionId": session_id},
            files={"audio": (filename, audio, mime_type)},
        )

    async def _post(self, data: dict, files: dict | None = None) -> InterviewAnswer:
        try:
            response = await self.http.post(f"{self.base_url}/api/interview", data=data, files=files)
        except httpx.TimeoutException as exc:
            raise ClientRequestError("The interview server did not answer in time") from exc
        except httpx.HTTPError as exc:
            raise ClientRequestError(f"Request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or not isinstance(body, dict) or "error" in body:
            message = body.get("error") if isinstance(body, dict) else None
            raise ClientRequestError(str(message or "Failed to process audio"))

        answer = str(body.get("answer") or "")
        try:
            spoken = encoding.decode(str(body.get("audioUrl") or ""))
        except EncodingError as exc:
            logger.warning("Unreadable audioUrl payload; speaking answer text instead | err=%s", exc)
            spoken = answer

        return InterviewAnswer(
            question=body.get("question"),
            answer=answer,
            spoken_text=spoken,
            session_id=body.get("sessionId"),
        )
