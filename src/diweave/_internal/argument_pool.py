from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from diweave.exceptions import DIWeaveInvalidArgumentError

DEFAULT_MAX_RETAINED_PER_SIZE = 16


class ArgumentBufferPool:
    """Reuse fixed-size argument lists between constructor and method calls.

    ``rent`` hands out a list of exactly ``size`` ``None`` slots; ``give_back``
    clears it and keeps it for the next caller asking for the same size. A
    buffer is on loan to one caller at a time and must come back exactly once.
    Prefer ``lease`` which returns the buffer on every exit path.
    """

    def __init__(self, *, max_retained_per_size: int = DEFAULT_MAX_RETAINED_PER_SIZE) -> None:
        if max_retained_per_size < 0:
            msg = "max_retained_per_size must be zero or positive."
            raise DIWeaveInvalidArgumentError(msg)
        self._max_retained_per_size = max_retained_per_size
        self._free: dict[int, list[list[Any]]] = {}
        self._on_loan: set[int] = set()
        self._lock = threading.Lock()

    def rent(self, size: int) -> list[Any]:
        """Return a buffer holding ``size`` empty slots.

        Args:
            size: Number of argument slots required.

        """
        if size < 0:
            msg = f"Buffer size must be zero or positive, got {size}."
            raise DIWeaveInvalidArgumentError(msg)
        with self._lock:
            bucket = self._free.get(size)
            buffer = bucket.pop() if bucket else [None] * size
            self._on_loan.add(id(buffer))
        return buffer

    def give_back(self, buffer: list[Any]) -> None:
        """Return a rented buffer to the pool.

        Raises:
            DIWeaveInvalidArgumentError: If buffer is not currently on loan.

        """
        with self._lock:
            buffer_id = id(buffer)
            if buffer_id not in self._on_loan:
                msg = "Buffer was not rented from this pool or was already returned."
                raise DIWeaveInvalidArgumentError(msg)
            self._on_loan.discard(buffer_id)
            size = len(buffer)
            for index in range(size):
                buffer[index] = None
            bucket = self._free.setdefault(size, [])
            if len(bucket) < self._max_retained_per_size:
                bucket.append(buffer)

    @contextmanager
    def lease(self, size: int) -> Iterator[list[Any]]:
        """Rent a buffer for the duration of a ``with`` block."""
        buffer = self.rent(size)
        try:
            yield buffer
        finally:
            self.give_back(buffer)

    def available(self, size: int) -> int:
        """Number of idle buffers of the given size."""
        with self._lock:
            return len(self._free.get(size, ()))

    @property
    def rented_count(self) -> int:
        """Number of buffers currently on loan."""
        return len(self._on_loan)

    def clear(self) -> None:
        """Drop idle buffers. Buffers on loan are unaffected."""
        with self._lock:
            self._free.clear()
