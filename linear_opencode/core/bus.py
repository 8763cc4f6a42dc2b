"""Async pub/sub event bus with named channels."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine
from uuid import uuid4

from linear_opencode.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class Event:
    channel: str
    payload: Any = None
    id: str = field(default_factory=lambda: uuid4().hex[:12])
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Handler = Callable[[Event], Coroutine[Any, Any, None]]


class EventBus:
    """Each subscriber gets its own bounded queue and consumer task.

    A full queue drops the event for that subscriber only.
    """

    def __init__(self, max_queue_size: int = 256) -> None:
        self._subscribers: dict[str, list[tuple[Handler, asyncio.Queue[Event]]]] = {}
        self._max_queue_size = max_queue_size
        self._running = False
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return self._running

    def subscribe(self, channel: str, handler: Handler) -> None:
        queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.setdefault(channel, []).append((handler, queue))
        if self._running:
            self._spawn(channel, handler, queue)

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscribers.get(channel, []))

    def publish_nowait(self, event: Event) -> None:
        for handler, queue in self._subscribers.get(event.channel, []):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                log.warning(
                    "event_queue_full",
                    channel=event.channel,
                    handler=handler.__qualname__,
                )

    async def publish(self, event: Event) -> None:
        self.publish_nowait(event)

    async def start(self) -> None:
        self._running = True
        for channel, handler_list in self._subscribers.items():
            for handler, queue in handler_list:
                self._spawn(channel, handler, queue)

    def _spawn(self, channel: str, handler: Handler, queue: asyncio.Queue[Event]) -> None:
        task = asyncio.create_task(
            self._consumer(handler, queue, channel),
            name=f"bus-{channel}-{handler.__qualname__}",
        )
        self._tasks.append(task)

    async def _consumer(
        self, handler: Handler, queue: asyncio.Queue[Event], channel: str
    ) -> None:
        while self._running:
            try:
                event = await asyncio.wait_for(queue.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            try:
                await handler(event)
            except Exception:
                log.exception("handler_error", channel=channel)

    async def stop(self) -> None:
        self._running = False
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
