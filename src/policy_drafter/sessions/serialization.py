from __future__ import annotations

import json
import math
from collections.abc import Iterable
from typing import Any

from loguru import logger

from policy_drafter.policy_record import PolicyRecord
from policy_drafter.sessions.conversation_log import ConversationLog
from policy_drafter.sessions.models import NEW_SESSION_TITLE, ConversationEntry, Role, Session


def encode_sessions(sessions: Iterable[Session]) -> str:
    return json.dumps([_session_to_dict(s) for s in sessions], ensure_ascii=True)


def decode_sessions(text: str | None) -> list[Session]:
    """Parse persisted sessions, dropping anything that does not decode cleanly.

    Invalid JSON or a non-list document yields an empty list. A malformed
    session is skipped on its own so one bad record does not discard the rest.
    """
    if not text:
        return []
    try:
        raw = json.loads(text)
    except ValueError as ex:
        logger.warning(f"Discarding unreadable session data: {ex}")
        return []
    if not isinstance(raw, list):
        logger.warning(f"Discarding session data of unexpected type {type(raw).__name__}")
        return []

    sessions: list[Session] = []
    seen: set[str] = set()
    for index, item in enumerate(raw):
        try:
            session = _session_from_dict(item)
        except (TypeError, ValueError, KeyError) as ex:
            logger.warning(f"Skipping malformed session at index {index}: {ex}")
            continue
        if session.id in seen:
            logger.warning(f"Skipping duplicate session id {session.id}")
            continue
        seen.add(session.id)
        sessions.append(session)
    return sessions


def _session_to_dict(session: Session) -> dict[str, Any]:
    return {
        "id": session.id,
        "title": session.title,
        "createdAt": session.created_at,
        "updatedAt": session.updated_at,
        "entries": [_entry_to_dict(e) for e in session.entries],
    }


def _entry_to_dict(entry: ConversationEntry) -> dict[str, Any]:
    data: dict[str, Any] = {
        "role": entry.role.value,
        "content": entry.content,
        "timestamp": entry.timestamp,
    }
    if entry.policy_data is not None:
        data["policyData"] = entry.policy_data.to_dict()
    return data


def _session_from_dict(data: Any) -> Session:
    if not isinstance(data, dict):
        raise ValueError("session must be an object")
    session_id = data["id"]
    if not isinstance(session_id, str) or not session_id:
        raise ValueError("session id must be a non-empty string")
    created_at = _millis(data["createdAt"])
    updated_at = max(_millis(data.get("updatedAt", created_at)), created_at)
    raw_entries = data.get("entries", [])
    if not isinstance(raw_entries, list):
        raise ValueError("entries must be a list")
    title = data.get("title")
    return Session(
        id=session_id,
        title=title if isinstance(title, str) and title else NEW_SESSION_TITLE,
        created_at=created_at,
        updated_at=updated_at,
        log=ConversationLog(tuple(_entry_from_dict(e) for e in raw_entries)),
    )


def _entry_from_dict(data: Any) -> ConversationEntry:
    if not isinstance(data, dict):
        raise ValueError("entry must be an object")
    content = data.get("content", "")
    if not isinstance(content, str):
        raise ValueError("entry content must be a string")
    policy = data.get("policyData")
    return ConversationEntry(
        role=Role(data["role"]),
        content=content,
        timestamp=_millis(data["timestamp"]),
        policy_data=PolicyRecord.from_dict(policy) if policy is not None else None,
    )


def _millis(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected epoch millis, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"epoch millis must be finite, got {value!r}")
    return int(value)
