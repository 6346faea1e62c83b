import os
from pathlib import Path
from dotenv import load_dotenv

_BACKEND_ROOT = Path(__file__).resolve().parents[2]
_BACKEND_ENV_PATH = _BACKEND_ROOT / ".env"
load_dotenv(dotenv_path=_BACKEND_ENV_PATH, override=False)


def _env_str(name: str, default: str = "") -> str:
    return str(os.getenv(name) or default).strip()


def _env_float(name: str, default: float, minimum: float) -> float:
    try:
        value = float(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        value = default
    return max(minimum, value)


def _env_int(name: str, default: int, minimum: int) -> int:
    try:
        value = int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        value = default
    return max(minimum, value)


# ---------- Providers ----------
GEMINI_API_KEY = _env_str("GEMINI_API_KEY")
OPENAI_API_KEY = _env_str("OPENAI_API_KEY")
ASSEMBLYAI_API_KEY = _env_str("ASSEMBLYAI_API_KEY")
DEEPGRAM_API_KEY = _env_str("DEEPGRAM_API_KEY")

GENERATION_PROVIDER = _env_str("GENERATION_PROVIDER", "gemini").lower()
MODEL_NAME = _env_str("MODEL_NAME", "gemini-2.5-flash" if GENERATION_PROVIDER == "gemini" else "gpt-4.1-mini")
TRANSCRIPTION_PROVIDER = _env_str("TRANSCRIPTION_PROVIDER", "assemblyai").lower()

# ---------- Deadlines ----------
TRANSCRIPTION_TIMEOUT_SEC = _env_float("TRANSCRIPTION_TIMEOUT_SEC", 60.0, 1.0)
TRANSCRIPTION_POLL_INTERVAL_SEC = _env_float("TRANSCRIPTION_POLL_INTERVAL_SEC", 1.0, 0.05)
GENERATION_TIMEOUT_SEC = _env_float("GENERATION_TIMEOUT_SEC", 30.0, 1.0)

# ---------- Sessions ----------
DEFAULT_SESSION_ID = _env_str("DEFAULT_SESSION_ID", "default") or "default"
SESSION_TTL_SEC = _env_float("SESSION_TTL_SEC", 3600.0, 60.0)
SESSION_CLEANUP_INTERVAL_SEC = _env_float("SESSION_CLEANUP_INTERVAL_SEC", 120.0, 5.0)
SESSION_MAX_COUNT = _env_int("SESSION_MAX_COUNT", 10000, 1)

# ---------- Persona ----------
PERSONA_FILE = _env_str("PERSONA_FILE")
PERSONA_TEXT = _env_str("PERSONA_TEXT")

# ---------- HTTP ----------
CORS_ALLOW_ORIGINS = _env_str("CORS_ALLOW_ORIGINS")
