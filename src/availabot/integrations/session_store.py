# Session Store: per-user OAuth state (CSRF token + credential), in memory.
# Created: 2026-10-18
#
# One store-wide reader/writer lock guards the whole dict. Readers share it,
# writers are exclusive, and nothing does I/O while holding it.

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Credential(Protocol):
    """An access credential: whether it can still be used, and its HTTP header."""

    def is_valid(self) -> bool: ...

    @property
    def authorization_header(self) -> str: ...


@dataclass(frozen=True)
class Session:
    """Snapshot of one user's auth state."""

    user_id: str
    csrf_token: str
    credential: Credential | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.credential is not None and self.credential.is_valid()


class ReadWriteLock:
    """Readers-share / writers-exclusive lock on top of ``threading.Condition``.

    Writer-preferring: once a writer is waiting, new readers queue behind it.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class SessionStore(ABC):
    """Maps a user ID to that user's :class:`Session`.

    Implementations must be safe to call from several threads at once and
    must never expose a partially written session.
    """

    @abstractmethod
    def put(self, session: Session) -> None:
        """Insert or overwrite the session for ``session.user_id``."""

    @abstractmethod
    def get(self, user_id: str) -> Session | None:
        """Return the session for *user_id*, or None if no flow was started."""

    @abstractmethod
    def attach_credential(self, user_id: str, csrf_token: str, credential: Credential) -> bool:
        """Store *credential* if the session's CSRF token is still *csrf_token*.

        Returns False (and changes nothing) if the session is gone or a newer
        flow replaced the token in the meantime.
        """

    @abstractmethod
    def begin_flow(self, user_id: str, csrf_token: str) -> Session:
        """Install *csrf_token* as the user's current flow and return the new session.

        Any credential the user already holds is carried over. The read of the
        old session and the write of the new one are one atomic step.
        """

    def is_authenticated(self, user_id: str) -> bool:
        """True if the user has a session holding a currently valid credential."""
        session = self.get(user_id)
        return session is not None and session.is_authenticated


class InMemorySessionStore(SessionStore):
    """Process-lifetime session cache. Sessions are never evicted."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = ReadWriteLock()

    def put(self, session: Session) -> None:
        with self._lock.write():
            self._sessions[session.user_id] = session
        logger.debug("Stored session for user %s", session.user_id)

    def get(self, user_id: str) -> Session | None:
        with self._lock.read():
            return self._sessions.get(user_id)

    def attach_credential(self, user_id: str, csrf_token: str, credential: Credential) -> bool:
        with self._lock.write():
            current = self._sessions.get(user_id)
            if current is None or current.csrf_token != csrf_token:
                return False
            self._sessions[user_id] = replace(current, credential=credential)
        logger.debug("Attached credential for user %s", user_id)
        return True

    def begin_flow(self, user_id: str, csrf_token: str) -> Session:
        with self._lock.write():
            previous = self._sessions.get(user_id)
            session = Session(
                user_id=user_id,
                csrf_token=csrf_token,
                credential=previous.credential if previous else None,
            )
            self._sessions[user_id] = session
        logger.debug("Began flow for user %s", user_id)
        return session

    def is_authenticated(self, user_id: str) -> bool:
        with self._lock.read():
            session = self._sessions.get(user_id)
            return session is not None and session.is_authenticated

    def user_ids(self) -> list[str]:
        with self._lock.read():
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._sessions)
