from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from loguru import logger


def utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


@dataclass(frozen=True)
class ActivityEvent:
    type: str
    message: str = ""
    agent: str | None = None
    created_at: str = field(default_factory=utc_now)


class ActivityFeed:
    """Live view of what the agent is doing for one session.

    Events are pushed in by whatever listens to the agent (``record``); the
    drafting controller only toggles ``processing`` and resets the feed.
    Subscribers are called after every change.
    """

    def __init__(self, session_id: str, *, max_events: int = 200):
        self.session_id = session_id
        self._max_events = max(1, max_events)
        self._listeners: list[Callable[[ActivityFeed], None]] = []
        self.connected = False
        self.processing = False
        self.active_agent: str | None = None
        self.events: list[ActivityEvent] = []
        self.thinking_messages: list[str] = []

    def subscribe(self, listener: Callable[[ActivityFeed], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_connected(self, connected: bool) -> None:
        self.connected = connected
        self._notify()

    def set_processing(self, processing: bool) -> None:
        self.processing = processing
        self._notify()

    def record(self, event: ActivityEvent) -> None:
        self.events.append(event)
        if len(self.events) > self._max_events:
            del self.events[: len(self.events) - self._max_events]
        if event.type == "thinking" and event.message:
            self.thinking_messages.append(event.message)
        if event.agent:
            self.active_agent = event.agent
        self._notify()

    def reset(self) -> None:
        self.processing = False
        self.active_agent = None
        self.events = []
        self.thinking_messages = []
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as ex:
                logger.warning(f"Activity listener failed for session {self.session_id}: {ex}")


class ActivityMonitor:
    def __init__(self, *, max_events: int = 200):
        self._max_events = max_events
        self._feeds: dict[str, ActivityFeed] = {}

    def feed_for(self, session_id: str) -> ActivityFeed:
        feed = self._feeds.get(session_id)
        if feed is None:
            feed = ActivityFeed(session_id, max_events=self._max_events)
            self._feeds[session_id] = feed
        return feed

    def reset(self, session_id: str) -> None:
        self.feed_for(session_id).reset()
