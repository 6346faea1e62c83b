import argparse
import asyncio
import logging
import os
import sys

from voicetwin.client.api import InterviewApiClient
from voicetwin.client.audio import SoundDeviceCapture
from voicetwin.client.recorder import ClientRecorder
from voicetwin.client.speech import ConsoleSpeechRenderer, SystemSpeechRenderer
from voicetwin.core.logger import configure_logging
from voicetwin.core.state import RecorderState

DEFAULT_BASE_URL = os.getenv("VOICETWIN_API_URL", "http://127.0.0.1:8000").rstrip("/")
TIMEOUT_SECONDS = float(os.getenv("VOICETWIN_CLIENT_TIMEOUT_SEC", "90"))

STATUS_TEXT = {
    RecorderState.IDLE: "Ready",
    RecorderState.LISTENING: "Listening...",
    RecorderState.THINKING: "Processing...",
    RecorderState.SPEAKING: "Speaking...",
}


def _print_state(previous: RecorderState, current: RecorderState) -> None:
    print(f"[{STATUS_TEXT[current]}]")


async def _prompt(message: str) -> str:
    return await asyncio.to_thread(input, message)


async def run(base_url: str, session_id: str | None, speak: bool, timeout_sec: float) -> int:
    api = InterviewApiClient(base_url, timeout_sec=timeout_sec)
    recorder = ClientRecorder(
        api,
        SoundDeviceCapture(),
        SystemSpeechRenderer() if speak else ConsoleSpeechRenderer(),
        session_id=session_id,
        request_timeout_sec=timeout_sec,
        on_state_change=_print_state,
    )
    print(f"Session: {recorder.session_id}")

    try:
        greeting = await recorder.bootstrap()
        if greeting is None:
            print(f"⚠ {recorder.last_error}")
        else:
            print(f"Candidate: {greeting.answer}")

        while True:
            command = (await _prompt("\nENTER to start recording, q to quit: ")).strip().lower()
            if command == "q":
                return 0

            if not await recorder.start():
                print(f"⚠ {recorder.last_error}")
                continue

            await _prompt("🎤 Recording... press ENTER to stop ")
            answer = await recorder.stop()
            if answer is None:
                print(f"⚠ {recorder.last_error}")
                continue
            print(f"You: {answer.question}")
            print(f"Candidate: {answer.answer}")
    finally:
        await recorder.close()
        await api.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Talk to the interview persona from the terminal.")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--session-id", default=None)
    parser.add_argument("--no-speech", action="store_true", help="print answers instead of speaking them")
    parser.add_argument("--timeout", type=float, default=TIMEOUT_SECONDS)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    configure_logging(logging.INFO if args.verbose else logging.WARNING)
    try:
        return asyncio.run(run(args.base_url, args.session_id, not args.no_speech, args.timeout))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
