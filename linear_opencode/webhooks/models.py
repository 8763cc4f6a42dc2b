"""Webhook payload and processing models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from linear_opencode.errors import MalformedPayloadError
from linear_opencode.references import Reference


@dataclass
class WebhookPayload:
    """Read-only view over a Linear webhook body."""

    type: str
    action: str
    data: dict[str, Any] = field(default_factory=dict)
    updated_from: dict[str, Any] | None = None
    actor: dict[str, Any] | None = None
    url: str | None = None
    created_at: str | None = None
    webhook_id: str | None = None
    organization_id: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, body: Any) -> WebhookPayload:
        if not isinstance(body, dict):
            raise MalformedPayloadError("Webhook payload must be a JSON object")
        kind = body.get("type")
        action = body.get("action")
        if not isinstance(kind, str) or not kind or not isinstance(action, str) or not action:
            raise MalformedPayloadError("Webhook payload is missing type or action")
        data = body.get("data")
        if data is not None and not isinstance(data, dict):
            raise MalformedPayloadError("Webhook payload data must be an object")
        actor = body.get("actor")
        updated_from = body.get("updatedFrom")
        return cls(
            type=kind,
            action=action,
            data=data or {},
            updated_from=updated_from if isinstance(updated_from, dict) else None,
            actor=actor if isinstance(actor, dict) else None,
            url=body.get("url"),
            created_at=body.get("createdAt"),
            webhook_id=body.get("webhookId"),
            organization_id=body.get("organizationId"),
            raw=body,
        )

    @property
    def actor_name(self) -> str:
        if self.actor and self.actor.get("name"):
            return str(self.actor["name"])
        return "Unknown"

    @property
    def actor_id(self) -> str | None:
        return self.actor.get("id") if self.actor else None


@dataclass
class EventContext:
    event_type: str
    action: str
    actor: str
    references: list[Reference] = field(default_factory=list)
    issue_id: str | None = None
    issue_identifier: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "eventType": self.event_type,
            "action": self.action,
            "actor": self.actor,
            "referenceCount": len(self.references),
            "issueId": self.issue_id,
            "issueIdentifier": self.issue_identifier,
        }


@dataclass
class ProcessingResult:
    success: bool
    processed: bool
    message: str
    context: EventContext | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "processed": self.processed,
            "message": self.message,
        }
        if self.context is not None:
            data["context"] = self.context.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data
