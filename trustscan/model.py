"""Data model for scan findings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Segment(str, Enum):
    """Operational area a finding belongs to."""

    FINOPS = "finops"
    SECURITY = "security"
    OBSERVABILITY = "observability"

    def __str__(self) -> str:
        return self.value


class Severity(str, Enum):
    """How serious a finding is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value


@dataclass
class Finding:
    """A single check result with the resources it flagged."""

    segment: Segment
    title: str
    category: str
    items: list[str] = field(default_factory=list)
    severity: Severity = Severity.MEDIUM
    provider: str = ""
    summary: str = ""
    resource_ids: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of this finding."""
        return {
            "segment": self.segment.value,
            "category": self.category,
            "title": self.title,
            "severity": self.severity.value,
            "items": list(self.items),
            "resourceIds": list(self.resource_ids),
            "provider": self.provider,
            "summary": self.summary,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Finding:
        """Build a finding from a mapping as produced by to_dict.

        Raises ValueError for an unknown segment or severity.
        """
        severity = data.get("severity")
        return cls(
            segment=Segment(data.get("segment", "")),
            title=data.get("title") or "",
            category=data.get("category") or "",
            items=list(data.get("items") or []),
            severity=Severity(severity) if severity else Severity.MEDIUM,
            provider=data.get("provider") or "",
            summary=data.get("summary") or "",
            resource_ids=list(data.get("resourceIds") or []),
            metadata=dict(data.get("metadata") or {}),
        )