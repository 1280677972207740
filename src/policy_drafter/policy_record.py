from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

DEFAULT_POLICY_TITLE = "Generated Policy Draft"


@dataclass(frozen=True)
class PolicyRecord:
    title: str = DEFAULT_POLICY_TITLE
    content: str = ""
    regulation_framework: str = ""
    scope_type: str = ""
    key_sections: tuple[str, ...] = field(default_factory=tuple)
    compliance_notes: str = ""
    revision_suggestions: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy_title": self.title,
            "policy_content": self.content,
            "regulation_framework": self.regulation_framework,
            "scope_type": self.scope_type,
            "key_sections": list(self.key_sections),
            "compliance_notes": self.compliance_notes,
            "revision_suggestions": self.revision_suggestions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PolicyRecord:
        """Rebuild a record from its persisted form. Raises ValueError on a bad shape."""
        if not isinstance(data, dict):
            raise ValueError("policy data must be an object")
        sections = data.get("key_sections", [])
        if not isinstance(sections, list):
            raise ValueError("key_sections must be a list")
        return cls(
            title=str(data.get("policy_title") or DEFAULT_POLICY_TITLE),
            content=str(data.get("policy_content") or ""),
            regulation_framework=str(data.get("regulation_framework") or ""),
            scope_type=str(data.get("scope_type") or ""),
            key_sections=tuple(str(s) for s in sections),
            compliance_notes=str(data.get("compliance_notes") or ""),
            revision_suggestions=str(data.get("revision_suggestions") or ""),
        )

    def to_markdown(self) -> str:
        return f"# {self.title}\n\n{self.content}"

    def download_filename(self) -> str:
        return re.sub(r"\s+", "_", self.title).lower() + ".md"
