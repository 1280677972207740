from __future__ import annotations

from typing import Any

_TEXT_KEYS = ("text", "message", "content", "answer", "summary", "policy_content")
_MAX_DEPTH = 8


def extract_plain_text(payload: Any) -> str:
    """Best-effort plain text from an agent response payload.

    Never raises. Strings pass through, ``result`` wrappers are followed, then
    the usual text-carrying keys are tried. Lists are joined line by line.
    """
    return _extract(payload, 0)


def _extract(payload: Any, depth: int) -> str:
    if depth > _MAX_DEPTH or payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, bool):
        return ""
    if isinstance(payload, (int, float)):
        return str(payload)
    if isinstance(payload, dict):
        if "result" in payload:
            text = _extract(payload["result"], depth + 1)
            if text.strip():
                return text
        for key in _TEXT_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
        if isinstance(payload.get("response"), (dict, str)):
            return _extract(payload["response"], depth + 1)
        return ""
    if isinstance(payload, (list, tuple)):
        parts = [_extract(item, depth + 1) for item in payload]
        return "\n".join(p for p in parts if p.strip())
    return ""
