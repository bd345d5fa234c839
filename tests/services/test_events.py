import asyncio
import threading

import pytest

from assessment_engine.utils.events import EventBus


@pytest.mark.asyncio
async def test_publish_runs_every_handler():
    bus = EventBus()
    received = []

    def sync_handler(data):
        received.append(("sync", data["session_id"]))

    async def async_handler(data):
        received.append(("async", data["session_id"]))

    bus.subscribe("session.completed", sync_handler)
    bus.subscribe("session.completed", async_handler)

    await bus.publish("session.completed", {"session_id": 7})

    assert sorted(received) == [("async", 7), ("sync", 7)]

@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others():
    bus = EventBus()
    received = []

    async def broken_handler(data):
        raise RuntimeError("boom")

    bus.subscribe("session.completed", broken_handler)
    bus.subscribe("session.completed", lambda data: received.append(data["session_id"]))

    await bus.publish("session.completed", {"session_id": 3})

    assert received == [3]

@pytest.mark.asyncio
async def test_publish_nowait_inside_running_loop():
    bus = EventBus()
    received = []
    bus.subscribe("session.completed", lambda data: received.append(data["session_id"]))

    bus.publish_nowait("session.completed", {"session_id": 11})
    await asyncio.gather(*list(bus._pending))

    assert received == [11]

def test_publish_nowait_without_loop():
    bus = EventBus()
    received = []
    done = threading.Event()

    def handler(data):
        received.append(data["session_id"])
        done.set()

    bus.subscribe("session.completed", handler)
    bus.publish_nowait("session.completed", {"session_id": 5})

    assert done.wait(timeout=5)
    assert received == [5]

def test_unsubscribed_handler_is_not_called():
    bus = EventBus()
    received = []

    def handler(data):
        received.append(data)

    bus.subscribe("session.completed", handler)
    bus.unsubscribe("session.completed", handler)
    bus.publish_nowait("session.completed", {"session_id": 1})

    assert received == []
