import asyncio
import logging
from typing import Protocol

import httpx

from voicetwin.errors import TranscriptionError

logger = logging.getLogger("voicetwin.services.transcription")

ASSEMBLYAI_BASE_URL = "https://api.assemblyai.com"
DEEPGRAM_BASE_URL = "https://api.deepgram.com"


class SpeechToTextProvider(Protocol):
    name: str

    async def recognize(self, audio: bytes, mime_type: str) -> str:
        ...


class AssemblyAIProvider:
    """
    Upload → create transcript → poll until the job reaches a terminal status.
    """

    name = "assemblyai"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        *,
        base_url: str = ASSEMBLYAI_BASE_URL,
        poll_interval_sec: float = 1.0,
    ):
        self.http = http_client
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.poll_interval_sec = max(0.0, float(poll_interval_sec))

    def _headers(self) -> dict[str, str]:
        return {"authorization": self.api_key}

    async def recognize(self, audio: bytes, mime_type: str) -> str:
        upload = await self.http.post(
            f"{self.base_url}/v2/upload",
            content=audio,
            headers={**self._headers(), "content-type": "application/octet-stream"},
        )
        upload.raise_for_status()
        upload_url = str(upload.json().get("upload_url") or "")
        if not upload_url:
            raise TranscriptionError("Transcription failed")

        created = await self.http.post(
            f"{self.base_url}/v2/transcript",
            json={"audio_url": upload_url},
            headers=self._headers(),
        )
        created.raise_for_status()
        job = created.json()
        transcript_id = str(job.get("id") or "")
        if not transcript_id:
            raise TranscriptionError("Transcription failed")

        while True:
            status = str(job.get("status") or "").lower()
            if status == "completed":
                return str(job.get("text") or "")
            if status == "error":
                logger.warning("AssemblyAI transcript error | id=%s err=%s", transcript_id, job.get("error"))
                raise TranscriptionError("Transcription failed")

            await asyncio.sleep(self.poll_interval_sec)
            polled = await self.http.get(
                f"{self.base_url}/v2/transcript/{transcript_id}",
                headers=self._headers(),
            )
            polled.raise_for_status()
            job = polled.json()


class DeepgramProvider:
    """Single pre-recorded request against the Deepgram listen endpoint."""

    name = "deepgram"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        *,
        base_url: str = DEEPGRAM_BASE_URL,
        model: str = "nova-2",
    ):
        self.http = http_client
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model

    async def recognize(self, audio: bytes, mime_type: str) -> str:
        response = await self.http.post(
            f"{self.base_url}/v1/listen",
            params={"model": self.model, "smart_format": "true", "punctuate": "true"},
            content=audio,
            headers={
                "Authorization": f"Token {self.api_key}",
                "Content-Type": mime_type or "application/octet-stream",
            },
        )
        response.raise_for_status()
        data = response.json()

        channels = (data.get("results") or {}).get("channels") or []
        if not channels:
            return ""
        alternatives = channels[0].get("alternatives") or []
        if not alternatives:
            return ""
        return str(alternatives[0].get("transcript") or "")


class TranscriptionGateway:
    def __init__(self, provider: SpeechToTextProvider, timeout_sec: float = 60.0):
        self.provider = provider
        self.timeout_sec = float(timeout_sec)

    async def transcribe(self, audio: bytes, mime_type: str = "audio/webm") -> str:
        try:
            text = await asyncio.wait_for(
                self.provider.recognize(audio, mime_type),
                timeout=self.timeout_sec,
            )
        except TranscriptionError:
            raise
        except asyncio.TimeoutError as exc:
            logger.warning("Transcription timeout | provider=%s timeout=%.1fs", self.provider.name, self.timeout_sec)
            raise TranscriptionError("Transcription timed out") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Transcription transport failure | provider=%s err=%s", self.provider.name, exc)
            raise TranscriptionError("Transcription failed") from exc
        except Exception as exc:
            logger.warning("Transcription failure | provider=%s err=%r", self.provider.name, exc)
            raise TranscriptionError("Transcription failed") from exc

        question = str(text or "").strip()
        if not question:
            raise TranscriptionError("No text transcribed from audio")
        return question


def build_transcription_gateway(
    provider_name: str,
    http_client: httpx.AsyncClient,
    *,
    assemblyai_api_key: str = "",
    deepgram_api_key: str = "",
    timeout_sec: float = 60.0,
    poll_interval_sec: float = 1.0,
) -> TranscriptionGateway:
    name = str(provider_name or "assemblyai").strip().lower()
    if name == "deepgram":
        if not deepgram_api_key:
            logger.error("DEEPGRAM_API_KEY not set - speech-to-text will NOT work")
        provider: SpeechToTextProvider = DeepgramProvider(http_client, deepgram_api_key)
    elif name == "assemblyai":
        if not assemblyai_api_key:
            logger.error("ASSEMBLYAI_API_KEY not set - speech-to-text will NOT work")
        provider = AssemblyAIProvider(http_client, assemblyai_api_key, poll_interval_sec=poll_interval_sec)
    else:
        raise ValueError(f"Unknown TRANSCRIPTION_PROVIDER: {provider_name}")

    logger.info("Transcription provider=%s timeout=%.1fs", provider.name, timeout_sec)
    return TranscriptionGateway(provider, timeout_sec=timeout_sec)
