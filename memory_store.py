# app/memory_store.py
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from models import DraftProtocol, History, TurnResult


class SessionNotFoundError(KeyError):
    pass


class SessionBusyError(RuntimeError):
    """A turn for this session is already waiting on the completion service."""


@dataclass
class ProtocolSession:
    session_id: str
    history: History = ()
    draft: DraftProtocol = field(default_factory=DraftProtocol)
    in_flight: bool = False
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)


class SessionStore:
    """In-memory drafting sessions keyed by session id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, ProtocolSession] = {}

    def get(self, session_id: str) -> ProtocolSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def begin_turn(self, session_id: str) -> ProtocolSession:
        """Mark the session busy and hand back its state for the turn."""
        with self._lock:
            session = self._sessions.setdefault(session_id, ProtocolSession(session_id=session_id))
            if session.in_flight:
                raise SessionBusyError(session_id)
            session.in_flight = True
            return session

    def finish_turn(self, session: ProtocolSession, result: Optional[TurnResult] = None) -> ProtocolSession:
        """Clear the busy flag, storing the turn's outcome when there is one.

        The session is the object begin_turn returned. If it was cleared or
        replaced while the turn was running, the outcome is dropped.
        """
        with self._lock:
            session.in_flight = False
            if self._sessions.get(session.session_id) is not session:
                return session
            if result is not None:
                session.history = result.history
                session.draft = result.updated_draft
                session.updated_at = time.time()
            return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            if session.in_flight:
                raise SessionBusyError(session_id)
            del self._sessions[session_id]
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
