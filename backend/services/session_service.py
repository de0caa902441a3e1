import time
import uuid
from threading import Lock
from typing import Optional

from cachetools import TTLCache

from config.settings import settings
from core.errors import ImageEditError
from core.image_store import ImageStore, get_image_store
from services.edit_session import EditSession

SESSION_LIMIT_MESSAGE = "Too many edit sessions are open right now. Please try again later."


class SessionLimitError(ImageEditError):
    error_type = "capacity"

    def __init__(self, message: str = SESSION_LIMIT_MESSAGE):
        super().__init__(message)


class SessionCache(TTLCache):
    """TTLCache that closes sessions as they expire"""

    def expire(self, time=None):
        expired = super().expire(time) or []
        for session_id, session in expired:
            session.close()
            print(f"🔍 Edit session {session_id} expired")
        return expired


class SessionService:
    """Keeps edit sessions in process memory.

    A session expires after SESSION_TTL_SECONDS without being accessed,
    and its image is released with it. Each access restarts the TTL of both.
    """

    def __init__(self, image_store: ImageStore, maxsize: int, ttl: int, timer=time.monotonic):
        self.image_store = image_store
        self.maxsize = maxsize
        self._sessions: SessionCache = SessionCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = Lock()

    def create_session(self) -> EditSession:
        session = EditSession(uuid.uuid4().hex, self.image_store)
        with self._lock:
            self._sessions.expire()
            if len(self._sessions) >= self.maxsize:
                raise SessionLimitError()
            self._sessions[session.session_id] = session
        print(f"✅ Created edit session {session.session_id}")
        return session

    def get_session(self, session_id: str) -> Optional[EditSession]:
        with self._lock:
            self._sessions.expire()
            session = self._sessions.get(session_id)
            if session is None:
                return None
            # re-setting the entry restarts its TTL
            self._sessions[session_id] = session
        session.keep_alive()
        return session

    def close_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        print(f"🔍 Closed edit session {session_id}")
        return True

    def session_count(self) -> int:
        with self._lock:
            self._sessions.expire()
            return len(self._sessions)


# Process-wide session registry
session_service = SessionService(
    get_image_store(),
    maxsize=settings.SESSION_MAX_SIZE,
    ttl=settings.SESSION_TTL_SECONDS,
)


def get_session_service() -> SessionService:
    return session_service
