from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from policy_drafter.policy_record import PolicyRecord
from policy_drafter.sessions.conversation_log import ConversationLog

NEW_SESSION_TITLE = "New Draft"
FALLBACK_SESSION_TITLE = "Policy Draft"
MAX_TITLE_CHARS = 50


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationEntry:
    role: Role
    content: str
    timestamp: int
    policy_data: PolicyRecord | None = None

    def __post_init__(self) -> None:
        if self.role is Role.USER and self.policy_data is not None:
            raise ValueError("User entries cannot carry policy data")


@dataclass(frozen=True)
class Session:
    id: str
    title: str
    created_at: int
    updated_at: int
    log: ConversationLog = field(default_factory=ConversationLog)

    @property
    def entries(self) -> tuple[ConversationEntry, ...]:
        return self.log.entries

    def last_policy(self) -> PolicyRecord | None:
        entry = self.log.last_with_policy_data()
        return entry.policy_data if entry is not None else None


def derive_title(log: ConversationLog) -> str:
    latest = log.last_with_policy_data()
    if latest is not None and latest.policy_data is not None:
        title = latest.policy_data.title[:MAX_TITLE_CHARS]
        if title:
            return title
    for entry in reversed(log.entries):
        if entry.role is Role.USER:
            prompt = entry.content.strip()[:MAX_TITLE_CHARS]
            if prompt:
                return prompt
            break
    return FALLBACK_SESSION_TITLE
