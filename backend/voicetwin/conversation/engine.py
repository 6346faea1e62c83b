import asyncio
import logging
from typing import Protocol

from voicetwin.core.logger import log_event
from voicetwin.errors import GenerationError
from voicetwin.models import GenerationConfig, Role, Turn
from voicetwin.persona import PersonaConfig
from voicetwin.session.store import SessionStore

logger = logging.getLogger("voicetwin.conversation.engine")

# Fixed for every request: short, consistent in-persona answers.
GENERATION_CONFIG = GenerationConfig(
    temperature=0.7,
    top_p=0.8,
    top_k=40,
    max_output_tokens=300,
)


class GenerationClient(Protocol):
    async def generate(self, history: list[Turn], question: str, config: GenerationConfig) -> str:
        ...


class ConversationEngine:
    def __init__(
        self,
        store: SessionStore,
        generator: GenerationClient,
        persona: PersonaConfig,
        timeout_sec: float = 30.0,
    ):
        self.store = store
        self.generator = generator
        self.persona = persona
        self.timeout_sec = float(timeout_sec)

    async def greet(self, session_id: str) -> str:
        """
        Reset the session to exactly the priming pair and return the canned greeting.
        No model call is made.
        """
        async with self.store.lock(session_id):
            self.store.replace(session_id, self.persona.priming_pair())
        log_event("conversation", "session_primed", session_id, turns=2)
        return self.persona.greeting

    async def answer(self, session_id: str, question: str) -> str:
        async with self.store.lock(session_id):
            history = self.store.get_or_create(session_id)

            try:
                reply = await asyncio.wait_for(
                    self.generator.generate(history, question, GENERATION_CONFIG),
                    timeout=self.timeout_sec,
                )
            except asyncio.TimeoutError as exc:
                logger.warning("Generation timeout | session_id=%s timeout=%.1fs", session_id, self.timeout_sec)
                raise GenerationError("Answer generation timed out") from exc
            except GenerationError:
                raise
            except Exception as exc:
                logger.warning("Generation failure | session_id=%s err=%s", session_id, exc)
                raise GenerationError() from exc

            answer = str(reply or "").strip()
            if not answer:
                raise GenerationError("Model returned an empty answer")

            history.append(Turn(role=Role.USER, text=question))
            history.append(Turn(role=Role.MODEL, text=answer))
            self.store.replace(session_id, history)

        log_event("conversation", "turn_committed", session_id, turns=len(history), answer=answer)
        return answer
