import asyncio
import logging
import platform
import shutil
from typing import Protocol

logger = logging.getLogger("voicetwin.client.speech")


class SpeechRenderer(Protocol):
    async def speak(self, text: str) -> None:
        ...


class ConsoleSpeechRenderer:
    async def speak(self, text: str) -> None:
        print(f"\n🔊 {text}\n")


class SystemSpeechRenderer:
    """
    Speaks through the platform TTS command: `say` on macOS, `espeak` elsewhere.
    Prints the text when neither is installed.
    """

    def __init__(self, rate_wpm: int = 170):
        self.rate_wpm = int(rate_wpm)
        self.fallback = ConsoleSpeechRenderer()

    def _command(self, text: str) -> list[str] | None:
        if platform.system() == "Darwin" and shutil.which("say"):
            return ["say", "-r", str(self.rate_wpm), text]
        if shutil.which("espeak"):
            return ["espeak", "-s", str(self.rate_wpm), text]
        return None

    async def speak(self, text: str) -> None:
        if not text.strip():
            return
        command = self._command(text)
        if command is None:
            await self.fallback.speak(text)
            return

        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await process.communicate()
        if process.returncode != 0:
            raise RuntimeError(f"{command[0]} exited with {process.returncode}: {stderr.decode(errors='replace').strip()}")
