"""Session state: the single source of truth for auth tokens and role."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError

from pyqapac._constants import DEFAULT_SESSION_NAMESPACE
from pyqapac.models.auth import UserInfo, UserRole

_logger = logging.getLogger(__name__)

SessionListener = Callable[["Session | None"], None]


class Session(BaseModel):
    """Immutable snapshot of the authenticated identity.

    Parameters
    ----------
    access_token : str or None
        Bearer token for authenticated calls.
    refresh_token : str or None
        Token used to obtain a new access token.
    user_id : int
        Backend user id.
    username, full_name : str
        Display fields.
    role : UserRole
        Rider, driver or admin.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    access_token: str | None = None
    refresh_token: str | None = None
    user_id: int = 0
    username: str = ""
    full_name: str = ""
    role: UserRole = UserRole.RIDER

    @property
    def is_logged_in(self) -> bool:
        return bool(self.access_token)


class SessionBackend(Protocol):
    """Opaque durable key-value storage for the session fields."""

    def load(self, namespace: str) -> dict[str, Any] | None:
        ...

    def store(self, namespace: str, values: dict[str, Any]) -> None:
        ...

    def delete(self, namespace: str) -> None:
        ...


class MemorySessionBackend:
    """Process-local backend, mostly for tests and short-lived scripts."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}

    def load(self, namespace: str) -> dict[str, Any] | None:
        values = self._data.get(namespace)
        return dict(values) if values is not None else None

    def store(self, namespace: str, values: dict[str, Any]) -> None:
        self._data[namespace] = dict(values)

    def delete(self, namespace: str) -> None:
        self._data.pop(namespace, None)


class JsonFileSessionBackend:
    """One JSON file per namespace inside *directory*.

    Writes go through a temporary file and :func:`os.replace`, so a crash
    mid-write leaves either the old or the new file, never a torn one.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._dir = Path(directory)

    def _path(self, namespace: str) -> Path:
        return self._dir / f"{namespace}.json"

    def load(self, namespace: str) -> dict[str, Any] | None:
        path = self._path(namespace)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            values = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Ignoring corrupt session file %s", path)
            return None
        return values if isinstance(values, dict) else None

    def store(self, namespace: str, values: dict[str, Any]) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._path(namespace)
        fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=f".{namespace}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(values, fh)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, namespace: str) -> None:
        self._path(namespace).unlink(missing_ok=True)


class SessionStore:
    """Thread-safe holder of the current :class:`Session`.

    All reads return values taken from one immutable snapshot, and every
    write swaps the snapshot under a lock, so a reporting tick can never
    observe a half-cleared session.

    Usage::

        store = SessionStore(JsonFileSessionBackend("~/.qapac"))
        store.save("T1", "R1", user)
        store.is_logged_in()  # True
    """

    def __init__(
        self,
        backend: SessionBackend | None = None,
        *,
        namespace: str = DEFAULT_SESSION_NAMESPACE,
    ) -> None:
        self._backend: SessionBackend = backend if backend is not None else MemorySessionBackend()
        self._namespace = namespace
        self._lock = threading.Lock()
        self._listeners: list[SessionListener] = []
        self._session: Session | None = self._restore()

    def _restore(self) -> Session | None:
        values = self._backend.load(self._namespace)
        if not values:
            return None
        try:
            session = Session.model_validate(values)
        except ValidationError:
            _logger.warning("Persisted session under %r is invalid; starting logged out", self._namespace)
            return None
        return session if session.is_logged_in else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, access_token: str, refresh_token: str | None, user: UserInfo) -> Session:
        """Replace every session field at once."""
        session = Session(
            access_token=access_token or None,
            refresh_token=refresh_token or None,
            user_id=user.id,
            username=user.username,
            full_name=user.full_name,
            role=user.role,
        )
        with self._lock:
            self._backend.store(self._namespace, session.model_dump(mode="json"))
            self._session = session
        _logger.debug("Session saved for user_id=%s role=%s", session.user_id, session.role)
        self._notify(session)
        return session

    def update_tokens(self, access_token: str, refresh_token: str | None = None) -> Session | None:
        """Rotate tokens after a refresh; no-op when logged out meanwhile."""
        with self._lock:
            current = self._session
            if current is None:
                return None
            session = current.model_copy(
                update={
                    "access_token": access_token or None,
                    "refresh_token": refresh_token or current.refresh_token,
                }
            )
            self._backend.store(self._namespace, session.model_dump(mode="json"))
            self._session = session
        self._notify(session)
        return session

    def clear(self) -> None:
        """Remove every session field. Safe to call repeatedly."""
        with self._lock:
            was_logged_in = self._session is not None
            self._backend.delete(self._namespace)
            self._session = None
        if was_logged_in:
            _logger.info("Session cleared")
            self._notify(None)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> Session | None:
        with self._lock:
            return self._session

    def is_logged_in(self) -> bool:
        session = self.snapshot()
        return session is not None and session.is_logged_in

    def role(self) -> UserRole | None:
        session = self.snapshot()
        return session.role if session is not None else None

    def access_token(self) -> str | None:
        session = self.snapshot()
        return session.access_token if session is not None else None

    def refresh_token(self) -> str | None:
        session = self.snapshot()
        return session.refresh_token if session is not None else None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self, session: Session | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                _logger.exception("Session listener %r failed", listener)
