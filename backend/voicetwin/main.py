from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import asyncio
import logging

import httpx

from voicetwin.conversation.engine import ConversationEngine, GenerationClient
from voicetwin.core import config
from voicetwin.core.logger import configure_logging
from voicetwin.models import InterviewRequest
from voicetwin.orchestrator import RequestOrchestrator
from voicetwin.persona import load_persona
from voicetwin.schemas import ErrorResponse, HistoryResponse, InterviewReply, TurnOut
from voicetwin.services.transcription_service import build_transcription_gateway
from voicetwin.session.store import InMemorySessionStore

configure_logging()

app = FastAPI(title="voicetwin – interview persona voice backend")
logger = logging.getLogger("voicetwin.main")


def _get_allowed_origins() -> list[str]:
    raw = config.CORS_ALLOW_ORIGINS
    if not raw:
        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    return [item.strip() for item in raw.split(",") if item.strip()]


_allowed_origins = _get_allowed_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


def _build_generator() -> GenerationClient:
    if config.GENERATION_PROVIDER == "openai":
        from voicetwin.services.openai_service import OpenAIChatClient

        return OpenAIChatClient(api_key=config.OPENAI_API_KEY, model_name=config.MODEL_NAME)
    if config.GENERATION_PROVIDER == "gemini":
        from voicetwin.services.gemini_service import GeminiChatClient

        return GeminiChatClient(api_key=config.GEMINI_API_KEY, model_name=config.MODEL_NAME)
    raise ValueError(f"Unknown GENERATION_PROVIDER: {config.GENERATION_PROVIDER}")


persona = load_persona(config.PERSONA_FILE, config.PERSONA_TEXT)
session_store = InMemorySessionStore(persona.priming_pair(), max_sessions=config.SESSION_MAX_COUNT)
http_client = httpx.AsyncClient(timeout=httpx.Timeout(config.TRANSCRIPTION_TIMEOUT_SEC))
orchestrator = RequestOrchestrator(
    transcription=build_transcription_gateway(
        config.TRANSCRIPTION_PROVIDER,
        http_client,
        assemblyai_api_key=config.ASSEMBLYAI_API_KEY,
        deepgram_api_key=config.DEEPGRAM_API_KEY,
        timeout_sec=config.TRANSCRIPTION_TIMEOUT_SEC,
        poll_interval_sec=config.TRANSCRIPTION_POLL_INTERVAL_SEC,
    ),
    conversation=ConversationEngine(
        store=session_store,
        generator=_build_generator(),
        persona=persona,
        timeout_sec=config.GENERATION_TIMEOUT_SEC,
    ),
    default_session_id=config.DEFAULT_SESSION_ID,
)
_session_cleanup_task: asyncio.Task | None = None


def get_orchestrator() -> RequestOrchestrator:
    return orchestrator


def get_session_store() -> InMemorySessionStore:
    return session_store


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("Rejected malformed request | path=%s errors=%s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid interview request"})


@app.on_event("startup")
async def startup_banner():
    global _session_cleanup_task
    logger.info("[SYSTEM] CORS allow_origins=%s", _allowed_origins)
    logger.info(
        "[SYSTEM] generation=%s model=%s transcription=%s",
        config.GENERATION_PROVIDER,
        config.MODEL_NAME,
        config.TRANSCRIPTION_PROVIDER,
    )
    logger.info(
        "[SYSTEM] sessions ttl_sec=%s max=%s cleanup_interval_sec=%s",
        config.SESSION_TTL_SEC,
        config.SESSION_MAX_COUNT,
        config.SESSION_CLEANUP_INTERVAL_SEC,
    )

    async def _session_cleanup_loop():
        while True:
            await asyncio.sleep(config.SESSION_CLEANUP_INTERVAL_SEC)
            removed = session_store.cleanup_expired(config.SESSION_TTL_SEC)
            if removed > 0:
                logger.info("[SYSTEM] cleaned expired sessions=%s", removed)

    _session_cleanup_task = asyncio.create_task(_session_cleanup_loop())


@app.on_event("shutdown")
async def shutdown_handler():
    global _session_cleanup_task
    if _session_cleanup_task is not None:
        _session_cleanup_task.cancel()
        try:
            await _session_cleanup_task
        except asyncio.CancelledError:
            pass
        finally:
            _session_cleanup_task = None
    await http_client.aclose()
    logger.info("[SYSTEM] shutdown complete")


@app.get("/healthz")
async def healthz():
    return {"status": "ok", "service": "voicetwin"}


@app.post(
    "/api/interview",
    responses={
        200: {"model": InterviewReply},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def interview(
    action: str | None = Form(None),
    session_id: str | None = Form(None, alias="sessionId"),
    audio: UploadFile | None = File(None),
    orchestrator: RequestOrchestrator = Depends(get_orchestrator),
):
    audio_bytes = None
    mime_type = "audio/webm"
    if audio is not None:
        audio_bytes = await audio.read()
        mime_type = audio.content_type or mime_type

    result = await orchestrator.handle(
        InterviewRequest(
            action=action,
            audio=audio_bytes,
            mime_type=mime_type,
            session_id=session_id or "",
        )
    )
    return JSONResponse(status_code=result.status_code, content=result.body)


@app.get(
    "/api/interview/{session_id}/history",
    response_model=HistoryResponse,
    responses={404: {"model": ErrorResponse}},
)
def interview_history(session_id: str, store: InMemorySessionStore = Depends(get_session_store)):
    turns = store.get(session_id)
    if turns is None:
        return JSONResponse(status_code=404, content={"error": "Unknown session"})
    return HistoryResponse(
        sessionId=session_id,
        turns=[TurnOut(**turn.to_dict()) for turn in turns],
    )
