from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from loguru import logger

from policy_drafter.policy_record import DEFAULT_POLICY_TITLE, PolicyRecord
from policy_drafter.text_extraction import extract_plain_text

UNPARSED_DRAFT_TITLE = "Generated Draft"

_EMPTY_RESPONSE = {"status": "success", "result": {}}
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def normalize_policy(raw: Any, *, regulation: str, scope: str) -> PolicyRecord:
    """Turn an agent response of unknown shape into a fully populated PolicyRecord.

    ``raw`` is whatever the transport produced: a mapping or an object exposing
    ``response``. The result is read from ``raw.response.result``, which may be an
    object, a JSON string, plain text, or an object wrapped in one more
    ``response`` layer. Missing or mistyped fields fall back to the extracted
    plain text, the caller's regulation/scope selection, or empty values.
    """
    response = _get(raw, "response")
    candidate = _decode_candidate(_get(response, "result"))

    nested = candidate.get("response")
    if isinstance(nested, Mapping):
        candidate = nested

    fallback_text = extract_plain_text(response if response is not None else _EMPTY_RESPONSE)

    sections = candidate.get("key_sections")
    return PolicyRecord(
        title=_text_field(candidate, "policy_title") or DEFAULT_POLICY_TITLE,
        content=_text_field(candidate, "policy_content") or fallback_text or "",
        regulation_framework=_text_field(candidate, "regulation_framework") or regulation,
        scope_type=_text_field(candidate, "scope_type") or scope,
        key_sections=tuple(str(s) for s in sections if s is not None) if isinstance(sections, list) else (),
        compliance_notes=_text_field(candidate, "compliance_notes"),
        revision_suggestions=_text_field(candidate, "revision_suggestions"),
    )


def _decode_candidate(value: Any) -> Mapping[str, Any]:
    if isinstance(value, str):
        text = _CODE_FENCE.sub("", value.strip())
        try:
            value = json.loads(text)
        except ValueError:
            logger.debug(f"Agent result is not JSON ({len(value)} chars); using it as policy content")
            return {"policy_content": value, "policy_title": UNPARSED_DRAFT_TITLE}
    if isinstance(value, Mapping):
        return value
    return {}


def _text_field(candidate: Mapping[str, Any], key: str) -> str:
    value = candidate.get(key)
    if isinstance(value, str) and value:
        return value
    return ""


def _get(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)
