"""Per-session busy flags and the latest kit shown to that session."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Literal, Optional

from app.config import DEFAULT_MAX_SESSIONS
from app.schemas import MarketingKit

logger = logging.getLogger(__name__)

Operation = Literal["kit", "source"]


class SessionBusy(RuntimeError):
    def __init__(self, session_id: str, running: str) -> None:
        super().__init__(f"A {running} request is already running for this session.")
        self.session_id = session_id
        self.running = running


@dataclass
class SessionState:
    kit_busy: bool = False
    source_busy: bool = False
    latest_kit: Optional[MarketingKit] = None

    @property
    def running(self) -> str | None:
        if self.kit_busy:
            return "kit"
        if self.source_busy:
            return "source"
        return None

    @property
    def idle(self) -> bool:
        return self.running is None and self.latest_kit is None


class SessionRegistry:
    """Keeps one :class:`SessionState` per browser session.

    Kit submissions and source-image generation each own a flag, and neither
    may start while the other (or another of the same kind) is running.

    At most ``max_sessions`` entries are kept. The least recently used session
    that is not running anything is evicted first, and an entry that holds no
    kit is dropped as soon as its operation finishes.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        self.max_sessions = max(int(max_sessions), 1)
        self._lock = threading.Lock()
        self._states: "OrderedDict[str, SessionState]" = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

    def state(self, session_id: str) -> SessionState:
        with self._lock:
            return self._states.get(session_id) or SessionState()

    def latest_kit(self, session_id: str) -> MarketingKit | None:
        with self._lock:
            state = self._states.get(session_id)
            return state.latest_kit if state else None

    def _entry(self, session_id: str) -> SessionState:
        # caller holds the lock
        state = self._states.get(session_id)
        if state is None:
            state = self._states[session_id] = SessionState()
        self._states.move_to_end(session_id)
        self._evict()
        return state

    def _evict(self) -> None:
        overflow = len(self._states) - self.max_sessions
        if overflow <= 0:
            return
        # the most recently touched entry is never evicted
        for session_id in list(self._states)[:-1]:
            if overflow <= 0:
                break
            if self._states[session_id].running is None:
                del self._states[session_id]
                overflow -= 1
                logger.debug("[session] evicted session=%s", session_id)

    @contextmanager
    def claim(self, session_id: str, operation: Operation) -> Iterator[SessionState]:
        """Mark ``operation`` as running and discard the session's previous kit."""

        with self._lock:
            state = self._states.get(session_id)
            if state is not None and state.running is not None:
                raise SessionBusy(session_id, state.running)
            state = self._entry(session_id)
            if operation == "kit":
                state.kit_busy = True
            else:
                state.source_busy = True
            state.latest_kit = None

        logger.debug("[session] claimed session=%s op=%s", session_id, operation)
        try:
            yield state
        finally:
            with self._lock:
                if operation == "kit":
                    state.kit_busy = False
                else:
                    state.source_busy = False
                if state.idle and self._states.get(session_id) is state:
                    del self._states[session_id]
            logger.debug("[session] released session=%s op=%s", session_id, operation)

    def store_kit(self, session_id: str, kit: MarketingKit) -> None:
        with self._lock:
            self._entry(session_id).latest_kit = kit


__all__ = ["SessionBusy", "SessionRegistry", "SessionState"]
