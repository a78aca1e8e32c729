import atexit
import threading
import time
from typing import Dict

from relay.errors import SessionNotFound
from relay.models import Session


class SessionRegistry:
    """In-memory map of session id to Session.

    Used like a Flask extension: create once at import time, bind settings
    with ``init_app``. Sessions idle for longer than ``ttl`` seconds are
    dropped lazily, and the least recently active ones are evicted once more
    than ``max_sessions`` exist. Either bound is disabled with 0.
    """

    def __init__(self, app=None):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        self.ttl = 0
        self.max_sessions = 0
        self.welcome_message = 'Welcome to the game!'
        self.reset_on_join = True
        self.logger = None
        self._atexit_registered = False
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.ttl = int(app.config.get('SESSION_TTL_SEC', 0))
        self.max_sessions = int(app.config.get('MAX_SESSIONS', 0))
        self.welcome_message = app.config.get('WELCOME_MESSAGE', self.welcome_message)
        self.reset_on_join = bool(app.config.get('RESET_ON_JOIN', True))
        self.logger = app.logger
        app.extensions['session_registry'] = self
        if not self._atexit_registered:
            atexit.register(self.shutdown)
            self._atexit_registered = True

    def create(self) -> Session:
        session = Session(self.welcome_message, reset_on_join=self.reset_on_join)
        with self._lock:
            self._evict_expired_locked()
            self._sessions[session.id] = session
            self._evict_over_capacity_locked()
        self._log(f"[create] session={session.id} total={len(self)}")
        return session

    def get(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and self._is_expired(session, time.time()):
                del self._sessions[session_id]
                self._log(f"[evict] session={session_id} reason=expired")
                session = None
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def evict_expired(self) -> int:
        with self._lock:
            return self._evict_expired_locked()

    def shutdown(self) -> None:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        self._log(f"[shutdown] dropped {count} session(s)")

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id) -> bool:
        return session_id in self._sessions

    def _is_expired(self, session: Session, now: float) -> bool:
        return bool(self.ttl) and now - session.last_active > self.ttl

    def _evict_expired_locked(self) -> int:
        if not self.ttl:
            return 0
        now = time.time()
        expired = [sid for sid, s in self._sessions.items() if self._is_expired(s, now)]
        for sid in expired:
            del self._sessions[sid]
            self._log(f"[evict] session={sid} reason=expired")
        return len(expired)

    def _evict_over_capacity_locked(self) -> None:
        if not self.max_sessions:
            return
        overflow = len(self._sessions) - self.max_sessions
        if overflow <= 0:
            return
        oldest = sorted(self._sessions.values(), key=lambda s: s.last_active)[:overflow]
        for session in oldest:
            del self._sessions[session.id]
            self._log(f"[evict] session={session.id} reason=capacity")

    def _log(self, msg: str) -> None:
        if self.logger is not None:
            self.logger.info(msg)
