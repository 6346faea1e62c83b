from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from dataclasses import dataclass
import logging
import secrets
from typing import Callable

from voicetwin.client.api import InterviewAnswer, InterviewApiClient
from voicetwin.client.audio import AudioCapture, Recording
from voicetwin.client.speech import SpeechRenderer
from voicetwin.core.state import InvalidTransition, RecorderEvent, RecorderState, next_state

logger = logging.getLogger("voicetwin.client.recorder")


def new_session_id() -> str:
    return secrets.token_hex(4)


@dataclass
class TranscriptLine:
    role: str
    text: str


class RecorderMachine:
    """Pure transition bookkeeping over the TRANSITIONS table; no I/O."""

    def __init__(self, on_change: Callable[[RecorderState, RecorderState], None] | None = None):
        self.state = RecorderState.IDLE
        self.on_change = on_change

    def can(self, event: RecorderEvent) -> bool:
        try:
            next_state(self.state, event)
        except InvalidTransition:
            return False
        return True

    def fire(self, event: RecorderEvent) -> RecorderState:
        previous = self.state
        self.state = next_state(previous, event)
        logger.info("Recorder %s → %s | event=%s", previous.value, self.state.value, event.value)
        if self.on_change is not None:
            self.on_change(previous, self.state)
        return self.state


class ClientRecorder:
    """
    Drives one interview from the client side.

    start(): idle → listening, holds the microphone.
    stop():  listening → thinking, releases the microphone, uploads the joined
             chunks, then thinking → speaking → idle, or thinking → idle on failure.
    """

    def __init__(
        self,
        api: InterviewApiClient,
        capture: AudioCapture,
        renderer: SpeechRenderer,
        *,
        session_id: str | None = None,
        request_timeout_sec: float = 90.0,
        on_state_change: Callable[[RecorderState, RecorderState], None] | None = None,
    ):
        self.api = api
        self.capture = capture
        self.renderer = renderer
        self.session_id = session_id or new_session_id()
        self.request_timeout_sec = float(request_timeout_sec)
        self.machine = RecorderMachine(on_change=on_state_change)
        self.transcript: list[TranscriptLine] = []
        self.last_error: str = ""
        self._capture_stack: AsyncExitStack | None = None
        self._recording: Recording | None = None

    @property
    def state(self) -> RecorderState:
        return self.machine.state

    async def bootstrap(self) -> InterviewAnswer | None:
        try:
            greeting = await asyncio.wait_for(self.api.greeting(self.session_id), timeout=self.request_timeout_sec)
        except Exception as exc:
            logger.warning("Failed to load greeting | session_id=%s err=%s", self.session_id, exc)
            self.last_error = str(exc) or "Failed to load greeting"
            return None

        self.transcript.append(TranscriptLine(role="assistant", text=greeting.answer))
        await self._render(greeting.spoken_text)
        return greeting

    async def start(self) -> bool:
        if not self.machine.can(RecorderEvent.START):
            raise InvalidTransition(self.state, RecorderEvent.START)

        self.last_error = ""
        stack = AsyncExitStack()
        try:
            self._recording = await stack.enter_async_context(self.capture.open())
        except Exception as exc:
            await stack.aclose()
            self._recording = None
            self.last_error = "Microphone access denied. Please enable microphone permissions."
            logger.warning("Error accessing microphone: %s", exc)
            return False

        self._capture_stack = stack
        self.machine.fire(RecorderEvent.START)
        return True

    async def stop(self) -> InterviewAnswer | None:
        if not self.machine.can(RecorderEvent.STOP):
            raise InvalidTransition(self.state, RecorderEvent.STOP)

        self.machine.fire(RecorderEvent.STOP)
        recording = self._recording
        try:
            await self._release_capture()
        except Exception as exc:
            logger.warning("Microphone release failed: %s", exc)
        audio = recording.to_bytes() if recording is not None else b""
        mime_type = recording.mime_type if recording is not None else "audio/wav"

        try:
            answer = await asyncio.wait_for(
                self.api.ask(self.session_id, audio, mime_type),
                timeout=self.request_timeout_sec,
            )
        except asyncio.CancelledError:
            self.last_error = "Request cancelled"
            self.machine.fire(RecorderEvent.REQUEST_FAILED)
            raise
        except asyncio.TimeoutError:
            self.last_error = "The interview server did not answer in time"
            self.machine.fire(RecorderEvent.REQUEST_FAILED)
            return None
        except Exception as exc:
            logger.warning("Error processing audio | session_id=%s err=%s", self.session_id, exc)
            self.last_error = str(exc) or "Failed to process audio. Please try again."
            self.machine.fire(RecorderEvent.REQUEST_FAILED)
            return None

        self.transcript.append(TranscriptLine(role="user", text=str(answer.question or "")))
        self.transcript.append(TranscriptLine(role="assistant", text=answer.answer))

        self.machine.fire(RecorderEvent.ANSWER_READY)
        try:
            await self._render(answer.spoken_text)
        finally:
            self.machine.fire(RecorderEvent.PLAYBACK_DONE)
        return answer

    async def close(self) -> None:
        await self._release_capture()

    async def _release_capture(self) -> None:
        stack, self._capture_stack = self._capture_stack, None
        self._recording = None
        if stack is not None:
            await stack.aclose()

    async def _render(self, text: str) -> None:
        # playback errors count as completion
        try:
            await self.renderer.speak(text)
        except Exception as exc:
            logger.warning("Speech rendering failed: %s", exc)
