from __future__ import annotations

import threading

import numpy as np


class BlockBuffer:
    """
    Thread-safe FIFO of mono samples handed out as complete blocks.

    Producers feed() arbitrary chunk sizes; read_block() waits until `size`
    samples are pending and removes exactly those. Blocks never overlap.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._pending = np.zeros(0, dtype=np.float32)

    @property
    def pending(self) -> int:
        with self._cond:
            return int(self._pending.size)

    def feed(self, mono: np.ndarray) -> None:
        chunk = np.asarray(mono, dtype=np.float32).reshape(-1)
        with self._cond:
            self._pending = np.concatenate((self._pending, chunk))
            self._cond.notify_all()

    def read_block(self, size: int, timeout: float | None = None) -> np.ndarray | None:
        if size <= 0:
            raise ValueError("block size must be > 0")
        with self._cond:
            ready = self._cond.wait_for(lambda: self._pending.size >= size, timeout=timeout)
            if not ready:
                return None
            block = self._pending[:size].copy()
            self._pending = self._pending[size:]
        return block

    def clear(self) -> None:
        with self._cond:
            self._pending = np.zeros(0, dtype=np.float32)
