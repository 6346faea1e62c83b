import logging
import time

from voicetwin import encoding
from voicetwin.conversation.engine import ConversationEngine
from voicetwin.core.logger import log_event, timed_stage
from voicetwin.errors import InputError, InterviewError
from voicetwin.models import InterviewRequest, OrchestratorResult
from voicetwin.services.transcription_service import TranscriptionGateway

logger = logging.getLogger("voicetwin.orchestrator")


class RequestOrchestrator:
    """
    Single entry point for one interview exchange.
    greeting: re-prime the session and return the canned greeting.
    audio:    transcribe -> answer -> encode.
    Every failure is converted to {"error": ...}; nothing escapes handle().
    """

    def __init__(
        self,
        transcription: TranscriptionGateway,
        conversation: ConversationEngine,
        default_session_id: str = "default",
    ):
        self.transcription = transcription
        self.conversation = conversation
        self.default_session_id = default_session_id

    def _session_id(self, request: InterviewRequest) -> str:
        return str(request.session_id or "").strip() or self.default_session_id

    async def handle(self, request: InterviewRequest) -> OrchestratorResult:
        session_id = self._session_id(request)
        started = time.monotonic()
        try:
            if request.is_greeting:
                result = await self._greeting(session_id)
            else:
                result = await self._exchange(session_id, request)
        except InterviewError as exc:
            log_event(
                "orchestrator",
                "request_failed",
                session_id,
                error_type=type(exc).__name__,
                error=exc.message,
                status=exc.status_code,
            )
            return OrchestratorResult(status_code=exc.status_code, body={"error": exc.message})
        except Exception as exc:
            logger.exception("Unexpected interview failure | session_id=%s", session_id)
            return OrchestratorResult(status_code=500, body={"error": "Failed to process interview"})

        log_event(
            "orchestrator",
            "request_completed",
            session_id,
            greeting=request.is_greeting,
            latency_ms=int((time.monotonic() - started) * 1000),
        )
        return result

    async def _greeting(self, session_id: str) -> OrchestratorResult:
        greeting = await self.conversation.greet(session_id)
        return OrchestratorResult(
            status_code=200,
            body={
                "question": None,
                "answer": greeting,
                "audioUrl": encoding.encode(greeting),
            },
        )

    async def _exchange(self, session_id: str, request: InterviewRequest) -> OrchestratorResult:
        if not request.audio:
            raise InputError("No audio file provided")

        with timed_stage("transcription", session_id, audio=request.audio, mime_type=request.mime_type):
            question = await self.transcription.transcribe(request.audio, request.mime_type)

        with timed_stage("generation", session_id, question=question):
            answer = await self.conversation.answer(session_id, question)

        return OrchestratorResult(
            status_code=200,
            body={
                "question": question,
                "answer": answer,
                "audioUrl": encoding.encode(answer),
                "sessionId": session_id,
            },
        )
