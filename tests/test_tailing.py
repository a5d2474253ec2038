"""Tests for the cancellable log tailer (core/tailing.py).

Coverage:
* Events overlapping between polls are emitted once.
* Out-of-order events within a poll are emitted oldest first.
* The loop stops when its stop event is set, including from emit.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence

from naws.core.models import Entity
from naws.core.tailing import LogTailer


def _event(event_id: str, ts: int) -> Entity:
    return Entity.from_record({"eventId": event_id, "timestamp": ts, "message": event_id}, "eventId")


class _ScriptedPoll:
    def __init__(self, *batches: list[Entity]) -> None:
        self._batches = list(batches)
        self.since: list[int | None] = []

    def __call__(self, since_ms: int | None) -> Sequence[Entity]:
        self.since.append(since_ms)
        return self._batches.pop(0) if self._batches else []


class TestPollOnce:
    def test_overlap_is_deduplicated(self) -> None:
        poll = _ScriptedPoll(
            [_event("a", 100), _event("b", 200)],
            [_event("b", 200), _event("c", 200), _event("d", 300)],
        )
        emitted: list[str] = []
        tailer = LogTailer(poll, lambda e: emitted.append(e.identifier))

        assert tailer.poll_once() == 2
        assert tailer.poll_once() == 2
        assert emitted == ["a", "b", "c", "d"]
        assert poll.since == [None, 200]
        assert tailer.emitted == 4

    def test_events_are_emitted_oldest_first(self) -> None:
        poll = _ScriptedPoll([_event("late", 300), _event("early", 100)])
        emitted: list[str] = []
        LogTailer(poll, lambda e: emitted.append(e.identifier)).poll_once()
        assert emitted == ["early", "late"]

    def test_events_before_start_are_skipped(self) -> None:
        poll = _ScriptedPoll([_event("old", 50), _event("new", 150)])
        emitted: list[str] = []
        tailer = LogTailer(poll, lambda e: emitted.append(e.identifier), since_ms=100)
        tailer.poll_once()
        assert emitted == ["new"]
        assert poll.since == [100]


class TestRun:
    def test_preset_stop_event_never_polls(self) -> None:
        stop = threading.Event()
        stop.set()
        poll = _ScriptedPoll([_event("a", 1)])
        assert LogTailer(poll, lambda e: None, stop=stop).run() == 0
        assert poll.since == []

    def test_stop_from_emit_ends_loop(self) -> None:
        poll = _ScriptedPoll([_event("a", 1), _event("b", 2)], [_event("c", 3)])
        emitted: list[str] = []
        tailer = LogTailer(poll, lambda e: None, interval=0.01)

        def emit(event: Entity) -> None:
            emitted.append(event.identifier)
            tailer.stop()

        tailer._emit = emit  # noqa: SLF001
        assert tailer.run() == 2
        assert emitted == ["a", "b"]

    def test_stop_from_another_thread(self) -> None:
        tailer = LogTailer(_ScriptedPoll(), lambda e: None, interval=0.01)
        worker = threading.Thread(target=tailer.run)
        worker.start()
        tailer.stop_event.set()
        worker.join(timeout=5)
        assert not worker.is_alive()
