from __future__ import annotations

import dataclasses
import time
from collections.abc import Callable

from loguru import logger

from policy_drafter.sessions.kv_store import KeyValueStore
from policy_drafter.sessions.models import NEW_SESSION_TITLE, ConversationEntry, Role, Session, derive_title
from policy_drafter.sessions.serialization import decode_sessions, encode_sessions

SESSIONS_KEY = "ppg_sessions"


def epoch_millis() -> int:
    return int(time.time() * 1000)


class SessionStore:
    """All drafting sessions of one user, kept in memory and mirrored to a key-value store.

    The collection is an immutable tuple that is replaced on every mutation,
    and the whole of it is written back after each change.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        *,
        key: str = SESSIONS_KEY,
        clock: Callable[[], int] = epoch_millis,
    ):
        self._kv_store = kv_store
        self._key = key
        self._clock = clock
        self._sessions: tuple[Session, ...] = ()
        self._current_session_id: str | None = None
        self._last_id_stamp = 0
        self._created_listeners: list[Callable[[Session], None]] = []
        self._selected_listeners: list[Callable[[str], None]] = []

    @property
    def initialized(self) -> bool:
        return self._current_session_id is not None

    @property
    def sessions(self) -> tuple[Session, ...]:
        return self._sessions

    @property
    def current_session_id(self) -> str:
        self._require_initialized()
        assert self._current_session_id is not None
        return self._current_session_id

    def current_session(self) -> Session:
        return self.get_session(self.current_session_id)

    def get_session(self, session_id: str) -> Session:
        for session in self._sessions:
            if session.id == session_id:
                return session
        raise KeyError(f"Session does not exist: {session_id}")

    def has_session(self, session_id: str) -> bool:
        return any(s.id == session_id for s in self._sessions)

    def now(self) -> int:
        return self._clock()

    def add_created_listener(self, listener: Callable[[Session], None]) -> None:
        self._created_listeners.append(listener)

    def add_selected_listener(self, listener: Callable[[str], None]) -> None:
        self._selected_listeners.append(listener)

    def initialize(self) -> Session:
        if self.initialized:
            return self.current_session()

        loaded = decode_sessions(self._kv_store.load(self._key))
        if loaded:
            self._sessions = tuple(loaded)
            self._current_session_id = loaded[0].id
            logger.info(f"Loaded {len(loaded)} persisted session(s); current={self._current_session_id}")
            return loaded[0]

        session = self._new_session()
        self._sessions = (session,)
        self._current_session_id = session.id
        self._persist()
        logger.info(f"No persisted sessions; started {session.id}")
        return session

    def create_session(self) -> Session:
        self._require_initialized()
        session = self._new_session()
        self._sessions = (session,) + self._sessions
        self._current_session_id = session.id
        self._persist()
        logger.debug(f"Created session {session.id}")
        for listener in self._created_listeners:
            listener(session)
        return session

    def select_session(self, session_id: str) -> bool:
        self._require_initialized()
        if not self.has_session(session_id):
            logger.warning(f"Cannot select unknown session {session_id}")
            return False
        self._current_session_id = session_id
        for listener in self._selected_listeners:
            listener(session_id)
        return True

    def append_entry(self, session_id: str, entry: ConversationEntry) -> Session:
        self._require_initialized()
        session = self.get_session(session_id)
        log = session.log.append(entry)
        title = session.title
        if entry.role is Role.ASSISTANT and entry.policy_data is not None:
            title = derive_title(log)
        updated = dataclasses.replace(
            session,
            log=log,
            title=title,
            updated_at=max(self._clock(), session.updated_at),
        )
        self._sessions = tuple(updated if s.id == session_id else s for s in self._sessions)
        self._persist()
        return updated

    def _new_session(self) -> Session:
        stamp = max(self._clock(), self._last_id_stamp + 1)
        while self.has_session(f"session_{stamp}"):
            stamp += 1
        self._last_id_stamp = stamp
        return Session(
            id=f"session_{stamp}",
            title=NEW_SESSION_TITLE,
            created_at=stamp,
            updated_at=stamp,
        )

    def _persist(self) -> None:
        self._kv_store.save(self._key, encode_sessions(self._sessions))

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise RuntimeError("SessionStore.initialize() must be called first")
