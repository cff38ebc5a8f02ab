from __future__ import annotations

import logging
import queue
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from scribeprep.errors import UnsupportedPlatformError
from scribeprep.types import AudioCapture
from scribeprep.wav import encode_wav

LOGGER = logging.getLogger("scribeprep.recorder")


@dataclass
class RecordingClock:
    started_at: Optional[float] = None
    paused_at: Optional[float] = None
    total_paused: float = 0.0

    def start(self, now: float) -> None:
        self.started_at = float(now)
        self.paused_at = None
        self.total_paused = 0.0

    def pause(self, now: float) -> None:
        if self.started_at is not None and self.paused_at is None:
            self.paused_at = float(now)

    def resume(self, now: float) -> None:
        if self.paused_at is not None:
            self.total_paused += float(now) - self.paused_at
            self.paused_at = None

    def reset(self) -> None:
        self.started_at = None
        self.paused_at = None
        self.total_paused = 0.0

    def elapsed(self, now: float) -> float:
        if self.started_at is None:
            return 0.0
        ref = self.paused_at if self.paused_at is not None else float(now)
        return max(0.0, ref - self.started_at - self.total_paused)


@dataclass(frozen=True)
class RecordingResult:
    capture: AudioCapture
    duration_sec: float
    size_bytes: int


class Recorder:
    def __init__(
        self,
        *,
        device: Optional[int] = None,
        sample_rate: int = 16000,
        block_sec: float = 0.10,
        clock_fn: Callable[[], float] = time.monotonic,
    ) -> None:
        self._device = device
        self._preferred_sr = int(sample_rate)
        self._block_sec = float(block_sec)
        self._now = clock_fn
        self._clock = RecordingClock()
        self._stream = None
        self._stream_sr = int(sample_rate)
        # Unbounded; recorded blocks are never dropped.
        self._queue: "queue.Queue[np.ndarray]" = queue.Queue()
        self._running = False
        self._paused = False

    @property
    def clock(self) -> RecordingClock:
        return self._clock

    @property
    def sample_rate(self) -> int:
        return int(self._stream_sr)

    @property
    def is_recording(self) -> bool:
        return self._running and not self._paused

    @property
    def is_paused(self) -> bool:
        return self._running and self._paused

    def elapsed(self) -> float:
        return self._clock.elapsed(self._now())

    def _callback(self, indata: np.ndarray, frames: int, time_info, status) -> None:  # noqa: ANN001
        if not self._running or self._paused:
            return
        if status:
            LOGGER.debug("Input stream status: %s", status)
        self._queue.put_nowait(indata[:, 0].astype(np.float32, copy=True))

    def start(self) -> int:
        if self._running:
            return int(self._stream_sr)

        try:
            import sounddevice as sd  # type: ignore
        except Exception as exc:
            raise UnsupportedPlatformError("Recording requires `sounddevice` (PortAudio).") from exc

        self._queue.queue.clear()  # type: ignore[attr-defined]

        # Prefer the pipeline rate, but fall back to the device default if unsupported.
        stream_sr = self._preferred_sr
        try:
            dev_info = sd.query_devices(self._device, "input")
            default_sr = int(dev_info.get("default_samplerate", stream_sr))
        except Exception:
            default_sr = stream_sr

        self._running = True
        self._paused = False
        for sr in dict.fromkeys((stream_sr, default_sr)):
            stream = None
            try:
                stream = sd.InputStream(
                    samplerate=sr,
                    device=self._device,
                    channels=1,
                    dtype="float32",
                    blocksize=max(0, int(sr * self._block_sec)),
                    callback=self._callback,
                )
                stream.start()
            except Exception as exc:
                LOGGER.debug("Could not open input stream at %d Hz: %s", sr, exc)
                if stream is not None:
                    stream.close()
                continue
            self._stream = stream
            self._stream_sr = int(sr)
            break

        if self._stream is None:
            self._running = False
            raise UnsupportedPlatformError("Failed to start microphone capture (sounddevice).")

        self._clock.start(self._now())
        LOGGER.info("Recording started at %d Hz", self._stream_sr)
        return int(self._stream_sr)

    def pause(self) -> None:
        if self.is_recording:
            self._paused = True
            self._clock.pause(self._now())

    def resume(self) -> None:
        if self.is_paused:
            self._paused = False
            self._clock.resume(self._now())

    def _drain(self) -> np.ndarray:
        blocks: list[np.ndarray] = []
        while True:
            try:
                blocks.append(self._queue.get_nowait())
            except queue.Empty:
                break
        if not blocks:
            return np.zeros((0,), dtype=np.float32)
        return np.concatenate(blocks)

    def stop(self) -> RecordingResult:
        duration = self._clock.elapsed(self._now())
        self._running = False
        if self._stream is not None:
            try:
                self._stream.stop()
            finally:
                self._stream.close()
                self._stream = None

        samples = self._drain()
        data = encode_wav(samples, self._stream_sr)
        self._clock.reset()
        self._paused = False
        LOGGER.info("Recording stopped: %.2fs, %d bytes", duration, len(data))
        return RecordingResult(
            capture=AudioCapture(data=data, format="wav"),
            duration_sec=float(duration),
            size_bytes=len(data),
        )
