"""Tests for ptyshell.session.wire (Wire, WireEvent, EventType)."""

from __future__ import annotations

import asyncio

from ptyshell.session.wire import EventType, Wire, WireEvent


# ---------------------------------------------------------------------------
# EventType
# ---------------------------------------------------------------------------


class TestEventType:
    def test_all_variants_exist(self) -> None:
        expected = {"OUTPUT", "MODE", "STATUS", "ERROR", "PUMP_END", "SESSION_END"}
        assert {e.name for e in EventType} == expected

    def test_values_are_lowercase(self) -> None:
        for e in EventType:
            assert e.value == e.name.lower()


# ---------------------------------------------------------------------------
# WireEvent
# ---------------------------------------------------------------------------


class TestWireEvent:
    def test_defaults(self) -> None:
        event = WireEvent(type=EventType.OUTPUT)
        assert event.data == {}

    def test_with_data(self) -> None:
        event = WireEvent(type=EventType.OUTPUT, data={"text": "hello"})
        assert event.data["text"] == "hello"


# ---------------------------------------------------------------------------
# Wire — basic send/subscribe
# ---------------------------------------------------------------------------


class TestWire:
    def test_send_to_subscriber(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.send(WireEvent(type=EventType.OUTPUT, data={"text": "hi"}))
        event = q.get_nowait()
        assert event is not None
        assert event.type == EventType.OUTPUT
        assert event.data["text"] == "hi"

    def test_send_to_multiple_subscribers(self) -> None:
        wire = Wire()
        q1 = wire.subscribe()
        q2 = wire.subscribe()
        wire.send_status("ok")
        e1 = q1.get_nowait()
        e2 = q2.get_nowait()
        assert e1 is not None and e2 is not None
        assert e1.type == e2.type == EventType.STATUS

    def test_order_preserved(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        for chunk in ("a", "b", "c"):
            wire.send_output(chunk)
        texts = [q.get_nowait().data["text"] for _ in range(3)]
        assert texts == ["a", "b", "c"]

    def test_unsubscribe(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.unsubscribe(q)
        wire.send_output("x")
        assert q.empty()

    def test_unsubscribe_nonexistent_is_safe(self) -> None:
        wire = Wire()
        q: asyncio.Queue[WireEvent | None] = asyncio.Queue()
        wire.unsubscribe(q)


# ---------------------------------------------------------------------------
# Wire — closing
# ---------------------------------------------------------------------------


class TestWireClose:
    def test_close_sends_session_end_then_sentinel(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.close()
        event = q.get_nowait()
        assert event is not None
        assert event.type == EventType.SESSION_END
        assert q.get_nowait() is None
        assert wire.closed

    def test_send_after_close_is_dropped(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.close()
        q.get_nowait()
        q.get_nowait()
        wire.send_output("too late")
        assert q.empty()

    def test_close_reaches_all_subscribers(self) -> None:
        wire = Wire()
        queues = [wire.subscribe() for _ in range(3)]
        wire.close()
        for q in queues:
            assert q.get_nowait().type == EventType.SESSION_END
            assert q.get_nowait() is None

    def test_close_idempotent(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.close()
        wire.close()
        assert q.qsize() == 2

    async def test_consumer_stops_on_sentinel(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        seen: list[EventType] = []

        async def consume() -> None:
            while True:
                event = await q.get()
                if event is None:
                    break
                seen.append(event.type)

        task = asyncio.create_task(consume())
        wire.send_output("x")
        wire.close()
        await asyncio.wait_for(task, timeout=1.0)
        assert seen == [EventType.OUTPUT, EventType.SESSION_END]


# ---------------------------------------------------------------------------
# Wire — convenience methods
# ---------------------------------------------------------------------------


class TestWireConvenience:
    def test_send_output(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.send_output("hello")
        event = q.get_nowait()
        assert event.type == EventType.OUTPUT
        assert event.data["text"] == "hello"

    def test_send_error(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.send_error("something failed")
        event = q.get_nowait()
        assert event.type == EventType.ERROR
        assert event.data["error"] == "something failed"

    def test_send_mode(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.send_mode("passthrough")
        event = q.get_nowait()
        assert event.type == EventType.MODE
        assert event.data["mode"] == "passthrough"

    def test_send_pump_end(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.send_pump_end("abc123", "end of stream", 0)
        event = q.get_nowait()
        assert event.type == EventType.PUMP_END
        assert event.data == {"session_id": "abc123", "reason": "end of stream", "exit_code": 0}
