"""Bounded, filterable event stream for live display of Linear activity."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable
from uuid import uuid4

from linear_opencode.core.bus import Event, EventBus, Handler
from linear_opencode.models import (
    CommandInfo,
    IssueInfo,
    Severity,
    StreamEvent,
    StreamEventType,
    StreamMetadata,
)
from linear_opencode.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_MAX_HISTORY = 1000
DESCRIPTION_LIMIT = 200
SOURCE = "linear-webhook"

CHANNEL_STREAMED = "event:streamed"
CHANNEL_STARTED = "stream:started"
CHANNEL_STOPPED = "stream:stopped"


def type_channel(event_type: StreamEventType | str) -> str:
    value = event_type.value if isinstance(event_type, StreamEventType) else event_type
    return f"event:{value}"


@dataclass
class StreamResult:
    """Outcome of one stream attempt; exactly one of the fields is set."""

    event: StreamEvent | None = None
    skipped: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.event is not None


def _truncate(text: str, limit: int = DESCRIPTION_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def _get(data: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _first(*values: Any, default: str) -> str:
    for value in values:
        if value:
            return str(value)
    return default


def format_event(raw: dict[str, Any], event_type: StreamEventType | str) -> StreamEvent:
    """Build a StreamEvent from raw webhook data. Raises on unknown types."""
    kind = StreamEventType(event_type)
    now = datetime.now(timezone.utc).isoformat()
    data = raw.get("data") or {}
    actor = _first(_get(raw, "actor", "name"), _get(raw, "user", "name"), default="Unknown")

    issue = IssueInfo(
        id=_first(data.get("issueId"), data.get("id"), default="unknown"),
        identifier=_first(_get(data, "issue", "identifier"), data.get("identifier"), default="UNKNOWN"),
        title=_first(_get(data, "issue", "title"), data.get("title"), default="Unknown Issue"),
        url=_first(_get(data, "issue", "url"), raw.get("url"), default="#"),
    )

    severity = Severity.INFO
    tags = [kind.value]
    command: CommandInfo | None = None

    if kind is StreamEventType.COMMENT_CREATED:
        title = f"New comment on {issue.identifier}"
        description = _truncate(data.get("body") or "No content")
        tags += ["comment", "created"]
    elif kind is StreamEventType.COMMENT_UPDATED:
        title = f"Comment updated on {issue.identifier}"
        description = _truncate(data.get("body") or "No content")
        tags += ["comment", "updated"]
    elif kind is StreamEventType.ISSUE_CREATED:
        title = f"New issue: {issue.identifier}"
        description = _truncate(data.get("description") or "No description")
        tags += ["issue", "created"]
    elif kind is StreamEventType.ISSUE_UPDATED:
        title = f"Issue updated: {issue.identifier}"
        description = f"Issue {raw.get('action', 'update')} by {actor}"
        tags += ["issue", "updated"]
    elif kind is StreamEventType.OPENCODE_COMMAND:
        command = CommandInfo.from_dict(raw["command"]) if raw.get("command") else None
        title = f"OpenCode command in {issue.identifier}"
        description = f"Command: {command.raw if command else 'Unknown command'}"
        tags += ["opencode", "command"]
    else:
        command = CommandInfo.from_dict(raw["command"]) if raw.get("command") else None
        title = f"OpenCode response in {issue.identifier}"
        description = _truncate((command.response if command else None) or "No response")
        severity = Severity.SUCCESS if command and command.success else Severity.WARNING
        tags += ["opencode", "response"]

    base_id = _first(data.get("id"), raw.get("id"), default="unknown")
    return StreamEvent(
        id=f"{kind.value}-{base_id}-{uuid4().hex[:8]}",
        type=kind,
        title=title,
        description=description,
        timestamp=now,
        actor=actor,
        issue=issue,
        command=command,
        metadata=StreamMetadata(source=SOURCE, processed_at=now, severity=severity, tags=tags),
    )


def matches_filter(event: StreamEvent, filter_text: str) -> bool:
    needle = filter_text.lower()
    haystack = [
        event.type.value,
        event.metadata.severity.value,
        *event.metadata.tags,
        event.actor,
        event.issue.identifier,
    ]
    return any(needle in value.lower() for value in haystack)


class EventStreamManager:
    """Formats, filters and keeps a FIFO history of stream events.

    Accepted events go out on the bus on ``event:streamed`` and on the
    per-type channel ``event:<type>``. While stopped, nothing is recorded
    but the history is kept.
    """

    def __init__(
        self,
        bus: EventBus | None = None,
        max_history: int = DEFAULT_MAX_HISTORY,
        filters: Iterable[str] = (),
    ) -> None:
        self._bus = bus or EventBus()
        self._history: deque[StreamEvent] = deque(maxlen=max_history)
        self._filters: set[str] = set(filters)
        self._active = False

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        log.info("event_stream_started", history_size=len(self._history))
        self._bus.publish_nowait(Event(CHANNEL_STARTED, {"history_size": len(self._history)}))

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        log.info("event_stream_stopped", history_size=len(self._history))
        self._bus.publish_nowait(Event(CHANNEL_STOPPED, {"history_size": len(self._history)}))

    def subscribe(self, event_type: StreamEventType | str | None, handler: Handler) -> None:
        """Attach ``handler`` to one event type, or to every event when None."""
        channel = CHANNEL_STREAMED if event_type is None else type_channel(event_type)
        self._bus.subscribe(channel, handler)

    def try_stream_event(
        self, raw: dict[str, Any], event_type: StreamEventType | str
    ) -> StreamResult:
        """Never raises: formatting failures come back as ``error``."""
        if not self._active:
            return StreamResult(skipped="inactive")

        try:
            event = format_event(raw, event_type)
        except Exception as e:
            return StreamResult(error=f"{type(e).__name__}: {e}")

        if self._filtered_out(event):
            return StreamResult(skipped="filtered")

        self._history.append(event)
        self._bus.publish_nowait(Event(CHANNEL_STREAMED, event))
        self._bus.publish_nowait(Event(type_channel(event.type), event))
        log.info(
            "event_streamed",
            type=event.type.value,
            title=event.title,
            actor=event.actor,
            issue=event.issue.identifier,
        )
        return StreamResult(event=event)

    def stream_event(
        self, raw: dict[str, Any], event_type: StreamEventType | str
    ) -> StreamEvent | None:
        result = self.try_stream_event(raw, event_type)
        if result.error:
            log.error("event_stream_format_failed", event_type=str(event_type), error=result.error)
        return result.event

    def _filtered_out(self, event: StreamEvent) -> bool:
        if not self._filters:
            return False
        return not any(matches_filter(event, f) for f in self._filters)

    def get_history(self) -> list[StreamEvent]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
        log.info("event_history_cleared")

    def set_filters(self, filters: Iterable[str]) -> None:
        self._filters = set(filters)
        log.info("event_filters_updated", filters=sorted(self._filters))

    def get_filters(self) -> list[str]:
        return sorted(self._filters)

    def get_stats(self) -> dict[str, Any]:
        return {
            "isActive": self._active,
            "historySize": len(self._history),
            "filterCount": len(self._filters),
            "maxHistorySize": self._history.maxlen,
        }
