"""Seek/pause control shared between a playback controller and the producer.

A controller thread writes the pause flag and a signed frame increment;
the producer consumes both once per batch. The increment is one-shot:
``consume()`` resets it to zero in the same critical section that reads
it, so a delta is never applied twice and a write racing with a read is
picked up on the next cycle instead of being lost.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class SeekRequest:
    """Snapshot of the seek channel taken by the producer.

    Attributes:
        paused: Whether playback is paused.
        increment: Signed frame delta requested since the last snapshot.
    """

    paused: bool
    increment: int

    @property
    def delta(self) -> int:
        """Cursor delta to apply before the next read.

        A paused source still advances by one on every read, so pause is
        expressed as ``increment - 1``: with no pending increment the
        cursor steps back one frame and the same frame is read again.
        """
        return self.increment - (1 if self.paused else 0)


class SeekChannel:
    """Lock-guarded ``(paused, increment)`` pair.

    Args:
        paused: Initial pause state.
        increment: Initial pending increment.
    """

    def __init__(self, paused: bool = False, increment: int = 0) -> None:
        self._lock = threading.Lock()
        self._paused = paused
        self._increment = increment

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        with self._lock:
            self._paused = bool(value)

    @property
    def increment(self) -> int:
        with self._lock:
            return self._increment

    def toggle_pause(self) -> bool:
        """Flip the pause flag and return the new state."""
        with self._lock:
            self._paused = not self._paused
            return self._paused

    def set_increment(self, increment: int) -> None:
        """Replace the pending increment."""
        with self._lock:
            self._increment = int(increment)

    def add_increment(self, increment: int) -> None:
        """Accumulate onto the pending increment (e.g. repeated key presses)."""
        with self._lock:
            self._increment += int(increment)

    def consume(self) -> SeekRequest:
        """Snapshot both fields and reset the increment to zero atomically."""
        with self._lock:
            request = SeekRequest(paused=self._paused, increment=self._increment)
            self._increment = 0
        return request

    def __repr__(self) -> str:
        with self._lock:
            paused, increment = self._paused, self._increment
        return f"SeekChannel(paused={paused}, increment={increment})"
