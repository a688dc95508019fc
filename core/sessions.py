"""
In-process session store.
Holds per-conversation turn history keyed by an opaque session id.
"""

import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

USER = "user"
ASSISTANT = "assistant"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Turn:
    role: str
    content: str
    timestamp: int = field(default_factory=now_ms)

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content, "ts": self.timestamp}


@dataclass
class SessionRecord:
    id: str
    history: List[Turn] = field(default_factory=list)
    created_at: int = field(default_factory=now_ms)
    last_seen: int = field(default_factory=now_ms)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def info(self) -> dict:
        return {
            "sessionId": self.id,
            "historyLength": len(self.history),
            "createdAt": self.created_at,
            "lastSeen": self.last_seen,
        }


def new_session_id() -> str:
    return str(uuid.uuid4())


def resolve_session_id(
    header_value: Any = None,
    body_value: Any = None,
    cookie_value: Any = None,
    max_length: int = 200,
) -> Tuple[str, bool]:
    """
    Pick the session id from header, payload or cookie (first one present).
    Returns (session_id, minted); minted is True when a fresh id had to be generated
    because nothing usable was supplied.
    """
    candidate = header_value or body_value or cookie_value
    if not candidate or not isinstance(candidate, str) or len(candidate) > max_length:
        return new_session_id(), True
    return candidate, False


class SessionStore:
    """
    Maps session id -> SessionRecord.

    The map is guarded by one lock and each record by its own, so two requests
    on the same session append their turns one after the other.
    With ttl_seconds unset, records live for the whole process.
    """

    def __init__(self, ttl_seconds: Optional[int] = None, clock: Callable[[], int] = now_ms):
        self._sessions: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()
        self._ttl_ms = ttl_seconds * 1000 if ttl_seconds else None
        self._clock = clock

    def get_or_create(self, session_id: str) -> SessionRecord:
        """Return the record for session_id, creating it on first reference; refreshes lastSeen."""
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            record = self._sessions.get(session_id)
            if record is None:
                record = SessionRecord(id=session_id, created_at=now, last_seen=now)
                self._sessions[session_id] = record
            else:
                record.last_seen = now
            return record

    def append_turn(self, session_id: str, turn: Turn) -> None:
        record = self.get_or_create(session_id)
        with record.lock:
            record.history.append(turn)

    def append_exchange(self, session_id: str, question: str, answer: str) -> None:
        """Append a user turn and the assistant reply together."""
        record = self.get_or_create(session_id)
        with record.lock:
            record.history.append(Turn(USER, question, self._clock()))
            record.history.append(Turn(ASSISTANT, answer, self._clock()))

    def reset(self, session_id: str) -> SessionRecord:
        """Clear the turn history; id and timestamps are kept."""
        record = self.get_or_create(session_id)
        with record.lock:
            record.history.clear()
        return record

    def history(self, session_id: str) -> List[Turn]:
        record = self.get_or_create(session_id)
        with record.lock:
            return list(record.history)

    def info(self, session_id: str) -> dict:
        return self.get_or_create(session_id).info()

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict_expired(self, now: int) -> None:
        if self._ttl_ms is None:
            return
        expired = [sid for sid, r in self._sessions.items() if now - r.last_seen > self._ttl_ms]
        for sid in expired:
            del self._sessions[sid]
