from __future__ import annotations

import threading
from dataclasses import dataclass

import numpy as np
import sounddevice as sd

from freq_det.buffering import BlockBuffer


@dataclass(frozen=True)
class AudioInputConfig:
    sample_rate: int = 44100
    channels: int = 1
    block_size: int = 1024
    device: int | str | None = None


class AudioInput:
    """Microphone capture; keeps the first channel and queues it in a BlockBuffer."""

    def __init__(self, config: AudioInputConfig | None = None) -> None:
        self._cfg = config or AudioInputConfig()
        self._buffer = BlockBuffer()
        self._lock = threading.Lock()
        self._dropped = 0
        self._stream: sd.InputStream | None = None

    @property
    def sample_rate(self) -> int:
        return self._cfg.sample_rate

    @property
    def is_running(self) -> bool:
        return self._stream is not None

    @property
    def dropped_callbacks(self) -> int:
        with self._lock:
            return self._dropped

    def start(self) -> None:
        if self._stream is not None:
            return

        def callback(indata, frames, time_info, status) -> None:  # noqa: ARG001
            if status:
                # Over/underflow: drop the chunk, the caller sees a gap.
                with self._lock:
                    self._dropped += 1
                return
            self._buffer.feed(indata[:, 0])

        self._stream = sd.InputStream(
            samplerate=self._cfg.sample_rate,
            channels=self._cfg.channels,
            blocksize=self._cfg.block_size,
            device=self._cfg.device,
            dtype="float32",
            callback=callback,
        )
        self._stream.start()

    def stop(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        finally:
            self._stream = None

    def feed(self, mono: np.ndarray) -> None:
        self._buffer.feed(mono)

    def read_block(self, size: int, timeout: float | None = None) -> np.ndarray | None:
        return self._buffer.read_block(size, timeout=timeout)

    def __enter__(self) -> AudioInput:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
