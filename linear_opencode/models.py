"""Stream event models shared by the stream manager, processor and tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StreamEventType(str, Enum):
    COMMENT_CREATED = "comment_created"
    COMMENT_UPDATED = "comment_updated"
    ISSUE_CREATED = "issue_created"
    ISSUE_UPDATED = "issue_updated"
    OPENCODE_COMMAND = "opencode_command"
    OPENCODE_RESPONSE = "opencode_response"


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class IssueInfo:
    id: str = "unknown"
    identifier: str = "UNKNOWN"
    title: str = "Unknown Issue"
    url: str = "#"


@dataclass
class CommandInfo:
    raw: str
    action: str
    success: bool | None = None
    response: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommandInfo:
        return cls(
            raw=data.get("raw", ""),
            action=data.get("action", ""),
            success=data.get("success"),
            response=data.get("response"),
        )


@dataclass
class StreamMetadata:
    source: str
    processed_at: str
    severity: Severity = Severity.INFO
    tags: list[str] = field(default_factory=list)


@dataclass
class StreamEvent:
    id: str
    type: StreamEventType
    title: str
    description: str
    timestamp: str
    actor: str
    issue: IssueInfo
    metadata: StreamMetadata
    command: CommandInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON shape consumed by the UI (camelCase keys)."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "timestamp": self.timestamp,
            "actor": self.actor,
            "issue": {
                "id": self.issue.id,
                "identifier": self.issue.identifier,
                "title": self.issue.title,
                "url": self.issue.url,
            },
            "metadata": {
                "source": self.metadata.source,
                "processedAt": self.metadata.processed_at,
                "severity": self.metadata.severity.value,
                "tags": list(self.metadata.tags),
            },
        }
        if self.command is not None:
            data["command"] = {
                "raw": self.command.raw,
                "action": self.command.action,
                "success": self.command.success,
                "response": self.command.response,
            }
        return data
