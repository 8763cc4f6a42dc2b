"""Tests for the async event bus."""

import asyncio

import pytest

from linear_opencode.core.bus import Event, EventBus


@pytest.fixture
def bus():
    return EventBus()


class TestEventBus:
    async def test_publish_subscribe(self, bus):
        received = []

        async def handler(event: Event):
            received.append(event)

        bus.subscribe("event:streamed", handler)
        await bus.start()

        await bus.publish(Event("event:streamed", {"n": 1}))

        # Give consumer time to process
        await asyncio.sleep(0.1)

        assert len(received) == 1
        assert received[0].payload == {"n": 1}

        await bus.stop()

    async def test_channels_are_isolated(self, bus):
        a, b = [], []

        async def on_a(event: Event):
            a.append(event)

        async def on_b(event: Event):
            b.append(event)

        bus.subscribe("a", on_a)
        bus.subscribe("b", on_b)
        await bus.start()

        await bus.publish(Event("a"))
        await bus.publish(Event("a"))
        await bus.publish(Event("b"))
        await asyncio.sleep(0.1)

        assert len(a) == 2
        assert len(b) == 1

        await bus.stop()

    async def test_subscribe_after_start(self, bus):
        received = []

        async def handler(event: Event):
            received.append(event)

        await bus.start()
        bus.subscribe("late", handler)
        bus.publish_nowait(Event("late"))
        await asyncio.sleep(0.1)

        assert len(received) == 1
        await bus.stop()

    async def test_handler_error_does_not_stop_consumer(self, bus):
        received = []

        async def flaky(event: Event):
            if event.payload == "boom":
                raise RuntimeError("boom")
            received.append(event)

        bus.subscribe("c", flaky)
        await bus.start()

        await bus.publish(Event("c", "boom"))
        await bus.publish(Event("c", "ok"))
        await asyncio.sleep(0.1)

        assert [e.payload for e in received] == ["ok"]
        await bus.stop()

    async def test_full_queue_drops_event(self):
        bus = EventBus(max_queue_size=1)

        async def handler(event: Event):
            pass

        bus.subscribe("c", handler)
        # Not started, so nothing drains the queue
        bus.publish_nowait(Event("c"))
        bus.publish_nowait(Event("c"))
        assert bus.subscriber_count("c") == 1

    async def test_stop_clears_tasks(self, bus):
        async def handler(event: Event):
            pass

        bus.subscribe("c", handler)
        await bus.start()
        assert bus.running
        await bus.stop()
        assert not bus.running
