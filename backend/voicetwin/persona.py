from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from voicetwin.models import Role, Turn

logger = logging.getLogger("voicetwin.persona")

GREETING_TEXT = (
    "Hello! I'm ready for the interview. Please ask me any questions about my "
    "background, skills, or experience."
)

PERSONA_ACK_TEXT = (
    "I understand. I will answer all interview questions as you, staying authentic "
    "to your background, skills, and personality."
)

DEFAULT_PERSONA_TEXT = """
You are a job candidate answering interview questions in the first person.

ABOUT YOU:
- Background: software engineer with a few years of full-stack and AI project experience.
- Strengths: learning quickly, shipping working software, collaborating openly.
- Growth areas: large-scale system design, model fine-tuning, public speaking.

PERSONALITY & TONE:
- Authentic, curious, and collaborative
- Answers are concise, spoken-style, and forward-looking
- Never mention that you are an AI model
"""


@dataclass(frozen=True)
class PersonaConfig:
    persona_text: str
    acknowledgement: str = PERSONA_ACK_TEXT
    greeting: str = GREETING_TEXT

    def priming_pair(self) -> list[Turn]:
        return [
            Turn(role=Role.USER, text=self.persona_text),
            Turn(role=Role.MODEL, text=self.acknowledgement),
        ]


def load_persona(persona_file: str = "", persona_text: str = "") -> PersonaConfig:
    """
    Resolve the persona once at startup.
    Order: explicit file, inline text, bundled placeholder.
    """
    if persona_file:
        path = Path(persona_file).expanduser()
        text = path.read_text(encoding="utf-8").strip()
        if not text:
            raise ValueError(f"Persona file is empty: {path}")
        logger.info("Persona loaded | source=file path=%s chars=%s", path, len(text))
        return PersonaConfig(persona_text=text)

    if persona_text.strip():
        logger.info("Persona loaded | source=env chars=%s", len(persona_text.strip()))
        return PersonaConfig(persona_text=persona_text.strip())

    logger.warning("No PERSONA_FILE or PERSONA_TEXT configured; using placeholder persona")
    return PersonaConfig(persona_text=DEFAULT_PERSONA_TEXT.strip())
