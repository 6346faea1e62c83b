from __future__ import annotations

from contextlib import AbstractAsyncContextManager, asynccontextmanager
import io
import logging
from threading import Lock
from typing import AsyncIterator, Protocol
import wave

logger = logging.getLogger("voicetwin.client.audio")


class CaptureError(RuntimeError):
    """Microphone could not be opened."""


class Recording:
    """Chunks buffered between start and stop, joined into one upload on demand."""

    def __init__(self, sample_rate_hz: int = 16000, channels: int = 1, mime_type: str = "audio/wav"):
        self.sample_rate_hz = int(sample_rate_hz)
        self.channels = int(channels)
        self.mime_type = mime_type
        self._chunks: list[bytes] = []
        self._lock = Lock()

    def add_chunk(self, data: bytes) -> None:
        if not data:
            return
        with self._lock:
            self._chunks.append(bytes(data))

    @property
    def chunk_count(self) -> int:
        with self._lock:
            return len(self._chunks)

    def pcm(self) -> bytes:
        with self._lock:
            return b"".join(self._chunks)

    def to_bytes(self) -> bytes:
        if self.mime_type != "audio/wav":
            return self.pcm()
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav_file:
            wav_file.setnchannels(self.channels)
            wav_file.setsampwidth(2)  # PCM16
            wav_file.setframerate(self.sample_rate_hz)
            wav_file.writeframes(self.pcm())
        return buffer.getvalue()


class AudioCapture(Protocol):
    def open(self) -> AbstractAsyncContextManager[Recording]:
        """Async context manager: holds the device for the lifetime of the block."""
        ...


class SoundDeviceCapture:
    def __init__(self, sample_rate_hz: int = 16000, channels: int = 1, blocksize: int = 1024):
        self.sample_rate_hz = sample_rate_hz
        self.channels = channels
        self.blocksize = blocksize

    @asynccontextmanager
    async def open(self) -> AsyncIterator[Recording]:
        try:
            import sounddevice as sd
        except ImportError as exc:
            raise CaptureError(
                "sounddevice is required for microphone capture. Install with: pip install 'voicetwin[client]'"
            ) from exc

        recording = Recording(sample_rate_hz=self.sample_rate_hz, channels=self.channels)

        def _callback(indata, frames, time_info, status):
            if status:
                logger.warning("Audio status: %s", status)
            recording.add_chunk(indata.tobytes())

        stream = None
        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate_hz,
                channels=self.channels,
                dtype="int16",
                blocksize=self.blocksize,
                callback=_callback,
            )
            stream.start()
        except Exception as exc:
            if stream is not None:
                stream.close()
            raise CaptureError(f"Microphone access denied or unavailable: {exc}") from exc

        try:
            yield recording
        finally:
            try:
                stream.stop()
            finally:
                stream.close()
            logger.info("Microphone released | chunks=%s", recording.chunk_count)
