from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from policy_drafter.sessions.models import ConversationEntry


class ConversationLog:
    """Append-only, time-ordered turns of one session.

    Instances are immutable: ``append`` returns a new log, so a reader holding
    an older log never sees it change.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: tuple[ConversationEntry, ...] = ()) -> None:
        self._entries = tuple(entries)

    @property
    def entries(self) -> tuple[ConversationEntry, ...]:
        return self._entries

    def append(self, entry: ConversationEntry) -> ConversationLog:
        return ConversationLog(self._entries + (entry,))

    def last_with_policy_data(self) -> ConversationEntry | None:
        for entry in reversed(self._entries):
            if entry.policy_data is not None:
                return entry
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConversationEntry]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConversationLog):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"ConversationLog({len(self._entries)} entries)"
