from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import time


class Role(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class Turn:
    role: Role
    text: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "text": self.text}


@dataclass
class SessionRecord:
    turns: list[Turn] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class GenerationConfig:
    temperature: float
    top_p: float
    top_k: int
    max_output_tokens: int


@dataclass
class InterviewRequest:
    action: str | None = None
    audio: bytes | None = None
    mime_type: str = "audio/webm"
    session_id: str = ""

    @property
    def is_greeting(self) -> bool:
        return self.action == "greeting"


@dataclass
class OrchestratorResult:
    status_code: int
    body: dict
