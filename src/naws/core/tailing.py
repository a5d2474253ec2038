"""Cancellable log tailing loop.

:class:`LogTailer` polls for events newer than a high-water timestamp
and emits each one exactly once.  The loop ends when its stop event is
set, so a signal handler (or a test) can cancel it cleanly between
polls.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence

from naws.core.models import Entity

Poll = Callable[[int | None], Sequence[Entity]]
Emit = Callable[[Entity], None]


class LogTailer:
    """Poll → de-duplicate → emit, until stopped.

    Parameters
    ----------
    poll:
        Returns events with ``timestamp >= since_ms``; receives ``None``
        until the first event has been seen.  Events must expose an
        integer ``timestamp`` field.
    emit:
        Called once per new event, oldest first.
    interval:
        Seconds to wait between polls.
    stop:
        Event that ends the loop when set; a fresh one is created when
        omitted.
    """

    def __init__(
        self,
        poll: Poll,
        emit: Emit,
        *,
        interval: float = 2.0,
        stop: threading.Event | None = None,
        since_ms: int | None = None,
    ) -> None:
        self._poll = poll
        self._emit = emit
        self._interval = interval
        self._stop = stop if stop is not None else threading.Event()
        self._high_water: int | None = since_ms
        self._seen_at_high_water: set[str] = set()
        self.emitted = 0

    @property
    def stop_event(self) -> threading.Event:
        return self._stop

    def stop(self) -> None:
        self._stop.set()

    def poll_once(self) -> int:
        """Run one poll and emit unseen events; return how many were new."""
        fresh = 0
        events = sorted(self._poll(self._high_water), key=lambda e: e.integer("timestamp"))
        for event in events:
            timestamp = event.integer("timestamp")
            if self._high_water is not None:
                if timestamp < self._high_water:
                    continue
                if timestamp == self._high_water and event.identifier in self._seen_at_high_water:
                    continue
            if self._high_water is None or timestamp > self._high_water:
                self._high_water = timestamp
                self._seen_at_high_water = set()
            self._seen_at_high_water.add(event.identifier)
            self._emit(event)
            fresh += 1
        self.emitted += fresh
        return fresh

    def run(self) -> int:
        """Poll until stopped; return the total number of emitted events."""
        while not self._stop.is_set():
            self.poll_once()
            self._stop.wait(self._interval)
        return self.emitted
