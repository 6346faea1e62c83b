import json
import logging
import time
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

logger = logging.getLogger("voicetwin.events")

# Interview content never reaches the log; only its size does.
PRIVATE_FIELDS = frozenset({"text", "question", "answer", "transcript", "persona", "prompt"})


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(format=LOG_FORMAT, level=level)


def summarize_field(name: str, value: Any) -> Any:
    if name.lower() in PRIVATE_FIELDS:
        return {"redacted": True, "length": len(str(value or ""))}
    if isinstance(value, (bytes, bytearray)):
        return {"bytes": len(value)}
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(k): summarize_field(str(k), v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [summarize_field(name, item) for item in value]
    return str(value)


def event_payload(stage: str, event: str, session_id: str, **fields: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"stage": stage, "event": event, "session_id": session_id or ""}
    for name, value in fields.items():
        payload[name] = summarize_field(name, value)
    return payload


def log_event(stage: str, event: str, session_id: str, level: int = logging.INFO, **fields: Any) -> None:
    """One JSON line per pipeline event, with interview text reduced to its length."""
    if not logger.isEnabledFor(level):
        return
    logger.log(level, json.dumps(event_payload(stage, event, session_id, **fields), ensure_ascii=False))


@contextmanager
def timed_stage(stage: str, session_id: str, **fields: Any) -> Iterator[None]:
    """
    Wrap one pipeline stage: logs `started`, then `completed` or `failed`
    with latency_ms. Exceptions propagate unchanged.
    """
    log_event(stage, "started", session_id, **fields)
    started = time.monotonic()
    try:
        yield
    except Exception as exc:
        log_event(
            stage,
            "failed",
            session_id,
            level=logging.WARNING,
            error_type=type(exc).__name__,
            latency_ms=int((time.monotonic() - started) * 1000),
        )
        raise
    log_event(stage, "completed", session_id, latency_ms=int((time.monotonic() - started) * 1000))
