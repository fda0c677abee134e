"""
SampleBuffer
============
Fixed-capacity circular store of the most recent audio samples.

A producer (audio callback, file streamer) pushes samples with feed() or
feed_block(); the decoder takes a chronological copy with snapshot().
Once full, the oldest sample always sits immediately after the write
cursor and is silently overwritten by the next feed.

Not thread safe: a producer on another thread must serialise feed and
snapshot itself (see capture.LiveCapture).
"""

from __future__ import annotations

from typing import Optional

import numpy as np


class SampleBuffer:

    def __init__(self, capacity: int, sample_rate: float):
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.capacity    = capacity
        self.sample_rate = float(sample_rate)

        self._data:    np.ndarray = np.zeros(capacity, dtype=np.float64)
        self._cursor:  int  = 0       # next write position
        self._wrapped: bool = False   # True once the cursor has passed capacity

    @classmethod
    def for_duration(cls, seconds: float, sample_rate: float) -> "SampleBuffer":
        return cls(max(1, int(round(seconds * sample_rate))), sample_rate)

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def feed(self, sample: float) -> None:
        self._data[self._cursor] = sample
        self._cursor += 1
        if self._cursor == self.capacity:
            self._cursor  = 0
            self._wrapped = True

    def feed_block(self, samples) -> None:
        """Append a chunk; equivalent to feed() per sample."""
        block = np.asarray(samples, dtype=np.float64).ravel()
        n = len(block)
        if n == 0:
            return
        if n >= self.capacity:
            # Only the tail survives; lay it out as a full, wrapped buffer
            self._data[:]  = block[-self.capacity:]
            self._cursor   = 0
            self._wrapped  = True
            return

        first = min(n, self.capacity - self._cursor)
        self._data[self._cursor:self._cursor + first] = block[:first]
        rest = n - first
        if rest:
            self._data[:rest] = block[first:]
        new_cursor = self._cursor + n
        if new_cursor >= self.capacity:
            self._wrapped = True
        self._cursor = new_cursor % self.capacity

    def clear(self) -> None:
        self._cursor  = 0
        self._wrapped = False

    # ------------------------------------------------------------------
    # Reader side
    # ------------------------------------------------------------------

    @property
    def wrapped(self) -> bool:
        return self._wrapped

    def __len__(self) -> int:
        return self.capacity if self._wrapped else self._cursor

    def snapshot(self, window: Optional[float] = None) -> np.ndarray:
        """
        Chronological copy of the held samples. With window (seconds), only
        the most recent window worth, capped at what is held.
        """
        if self._wrapped:
            ordered = np.concatenate((self._data[self._cursor:], self._data[:self._cursor]))
        else:
            ordered = self._data[:self._cursor].copy()

        if window is not None:
            n = max(0, int(round(window * self.sample_rate)))
            if n < len(ordered):
                ordered = ordered[len(ordered) - n:].copy()
        return ordered
