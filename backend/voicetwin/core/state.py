# backend/voicetwin/core/state.py

from enum import Enum


class RecorderState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    THINKING = "thinking"
    SPEAKING = "speaking"


class RecorderEvent(str, Enum):
    START = "start"
    STOP = "stop"
    ANSWER_READY = "answer_ready"
    REQUEST_FAILED = "request_failed"
    PLAYBACK_DONE = "playback_done"


class InvalidTransition(RuntimeError):
    def __init__(self, state: RecorderState, event: RecorderEvent):
        super().__init__(f"Event '{event.value}' is not allowed while '{state.value}'")
        self.state = state
        self.event = event


TRANSITIONS: dict[tuple[RecorderState, RecorderEvent], RecorderState] = {
    (RecorderState.IDLE, RecorderEvent.START): RecorderState.LISTENING,
    (RecorderState.LISTENING, RecorderEvent.STOP): RecorderState.THINKING,
    (RecorderState.THINKING, RecorderEvent.ANSWER_READY): RecorderState.SPEAKING,
    (RecorderState.THINKING, RecorderEvent.REQUEST_FAILED): RecorderState.IDLE,
    (RecorderState.SPEAKING, RecorderEvent.PLAYBACK_DONE): RecorderState.IDLE,
}


def next_state(state: RecorderState, event: RecorderEvent) -> RecorderState:
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransition(state, event) from None
