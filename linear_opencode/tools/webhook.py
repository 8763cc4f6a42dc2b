"""Authentication, webhook processing and event stream tools."""

from __future__ import annotations

from typing import Any

from linear_opencode.core.stream import EventStreamManager
from linear_opencode.linear.context import LinearContext
from linear_opencode.tools.base import BaseTool, ToolResult, boolean, number, schema, string_list
from linear_opencode.utils.logging import get_logger
from linear_opencode.webhooks.models import WebhookPayload
from linear_opencode.webhooks.processor import WebhookEventProcessor

log = get_logger(__name__)

PROCESSOR_FEATURES = [
    "Comment event processing",
    "Issue event processing",
    "OpenCode reference detection",
    "Command execution",
    "Event streaming",
]


class AuthTool(BaseTool):
    def __init__(self, context: LinearContext) -> None:
        self._context = context

    @property
    def name(self) -> str:
        return "linear_auth"

    @property
    def description(self) -> str:
        return "Authenticate with Linear and test the connection"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({})

    async def execute(self, **kwargs: Any) -> ToolResult:
        # test_auth reports failures as text rather than raising
        message = await self._context.test_auth()
        return ToolResult(
            success="Successfully authenticated" in message,
            output=message,
            error=message,
        )


class WebhookProcessTool(BaseTool):
    def __init__(self, processor: WebhookEventProcessor) -> None:
        self._processor = processor

    @property
    def name(self) -> str:
        return "linear_webhook_process"

    @property
    def description(self) -> str:
        return "Process a Linear webhook event payload"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {"payload": {"type": "object", "description": "Linear webhook payload"}},
            required=["payload"],
        )

    async def execute(self, **kwargs: Any) -> ToolResult:
        try:
            payload = WebhookPayload.from_dict(kwargs.get("payload"))
            result = await self._processor.process_event(payload)
        except Exception as e:
            log.warning("webhook_process_tool_failed", error=str(e))
            return ToolResult(success=False, error=str(e))

        data = result.to_dict()
        data.pop("success")
        data.pop("error", None)
        return ToolResult(success=result.success, error=result.error or result.message, data=data)


class WebhookStatusTool(BaseTool):
    def __init__(self, processor: WebhookEventProcessor) -> None:
        self._processor = processor

    @property
    def name(self) -> str:
        return "linear_webhook_status"

    @property
    def description(self) -> str:
        return "Get the status of the Linear webhook processor"

    @property
    def parameters(self) -> dict[str, Any]:
        return schema({})

    async def execute(self, **kwargs: Any) -> ToolResult:
        try:
            status = self._processor.status()
        except Exception as e:
            log.exception("webhook_status_error")
            return ToolResult(success=False, error=str(e))
        ready = status["webhookSecretConfigured"]
        return ToolResult(
            success=True,
            data={
                "status": "Webhook processor is ready" if ready else "Webhook secret is not configured",
                "processor": type(self._processor).__name__,
                "features": list(PROCESSOR_FEATURES),
                **status,
            },
        )


class StreamHistoryTool(BaseTool):
    def __init__(self, stream: EventStreamManager) -> None:
        self._stream = stream

    @property
    def name(self) -> str:
        return "linear_stream_history"

    @property
    def description(self) -> str:
        return (
            "Show recent streamed Linear events. Optionally replace the active "
            "filters or clear the history."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return schema(
            {
                "limit": number("Number of most recent events to return (default: 20)"),
                "filters": string_list("Replace the active filters (case-insensitive substrings)"),
                "clear": boolean("Clear the history after reading it"),
            }
        )

    async def execute(self, **kwargs: Any) -> ToolResult:
        try:
            if kwargs.get("filters") is not None:
                self._stream.set_filters(kwargs["filters"])
            limit = kwargs.get("limit")
            limit = 20 if limit is None else int(limit)
            history = self._stream.get_history()
            events = [e.to_dict() for e in history[-limit:]] if limit > 0 else []
            stats = self._stream.get_stats()
            if kwargs.get("clear"):
                self._stream.clear_history()
        except Exception as e:
            log.exception("stream_history_error")
            return ToolResult(success=False, error=str(e))
        return ToolResult(
            success=True,
            data={
                "events": events,
                "count": len(events),
                "filters": self._stream.get_filters(),
                "stats": stats,
            },
        )
