from __future__ import annotations

import asyncio
from collections import OrderedDict
import logging
import time
from threading import Lock
from typing import Protocol

from voicetwin.models import SessionRecord, Turn

logger = logging.getLogger("voicetwin.session.store")


class SessionStore(Protocol):
    def get_or_create(self, session_id: str) -> list[Turn]:
        ...

    def replace(self, session_id: str, turns: list[Turn]) -> None:
        ...

    def get(self, session_id: str) -> list[Turn] | None:
        ...

    def lock(self, session_id: str) -> asyncio.Lock:
        ...


class InMemorySessionStore:
    """
    Process-local turn history keyed by session id.

    Reads hand out copies; callers mutate their copy and `replace` it.
    `lock(session_id)` gives the per-session mutex the conversation engine
    holds across that read-modify-write.
    """

    def __init__(self, priming_pair: list[Turn], max_sessions: int = 10000):
        self._lock = Lock()
        self._priming_pair = list(priming_pair)
        self._max_sessions = max(1, int(max_sessions))
        self._sessions: OrderedDict[str, SessionRecord] = OrderedDict()
        self._session_locks: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def get_or_create(self, session_id: str) -> list[Turn]:
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                record = SessionRecord(turns=list(self._priming_pair))
                self._install(session_id, record)
            else:
                record.updated_at = time.time()
                self._sessions.move_to_end(session_id)
            return list(record.turns)

    def replace(self, session_id: str, turns: list[Turn]) -> None:
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                self._install(session_id, SessionRecord(turns=list(turns)))
                return
            record.turns = list(turns)
            record.updated_at = time.time()
            self._sessions.move_to_end(session_id)

    def get(self, session_id: str) -> list[Turn] | None:
        with self._lock:
            record = self._sessions.get(session_id)
            return list(record.turns) if record else None

    def lock(self, session_id: str) -> asyncio.Lock:
        with self._lock:
            session_lock = self._session_locks.get(session_id)
            if session_lock is None:
                session_lock = asyncio.Lock()
                self._session_locks[session_id] = session_lock
            return session_lock

    def cleanup_expired(self, ttl_sec: float) -> int:
        cutoff = time.time() - max(0.0, float(ttl_sec))
        removed = 0
        with self._lock:
            for session_id, record in list(self._sessions.items()):
                if record.updated_at > cutoff:
                    continue
                if self._is_busy(session_id):
                    continue
                self._drop(session_id)
                removed += 1
        return removed

    # caller holds self._lock
    def _install(self, session_id: str, record: SessionRecord) -> None:
        self._sessions[session_id] = record
        self._sessions.move_to_end(session_id)
        while len(self._sessions) > self._max_sessions:
            evicted = next(iter(self._sessions))
            if evicted == session_id:
                break
            self._drop(evicted)
            logger.info("Session evicted (capacity) | session_id=%s max=%s", evicted, self._max_sessions)

    def _drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        if not self._is_busy(session_id):
            self._session_locks.pop(session_id, None)

    def _is_busy(self, session_id: str) -> bool:
        session_lock = self._session_locks.get(session_id)
        return bool(session_lock and session_lock.locked())
