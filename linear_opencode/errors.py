"""Exception types shared across the Linear client and webhook pipeline."""

from __future__ import annotations

from typing import Any


class LinearOpenCodeError(Exception):
    """Base class for errors raised by this package."""


class LinearAPIError(LinearOpenCodeError):
    """The Linear GraphQL API returned errors or a failing HTTP status."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []
        self.status = status


class AuthenticationError(LinearOpenCodeError):
    """No usable Linear credential."""


class NotFoundError(LinearOpenCodeError):
    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(f"{entity_type.capitalize()} {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class OwnershipError(LinearOpenCodeError):
    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: You are not the creator/owner. "
            "Use force: true to override this safety check."
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class MalformedPayloadError(LinearOpenCodeError):
    """Webhook body is not valid JSON or lacks the type/action envelope."""
