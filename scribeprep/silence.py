from __future__ import annotations

from typing import Tuple, Union, overload

import numpy as np

from scribeprep.audio.buffer import PCMBuffer


def silent_mask(samples: np.ndarray, threshold: float) -> np.ndarray:
    samples = np.asarray(samples, dtype=np.float32).reshape(-1)
    return np.abs(samples) <= float(threshold)


def _runs(mask: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Run-length encode a boolean mask into (starts, lengths, values)."""
    mask = np.asarray(mask, dtype=bool).reshape(-1)
    if mask.size == 0:
        empty = np.zeros((0,), dtype=np.int64)
        return empty, empty, np.zeros((0,), dtype=bool)
    change = np.flatnonzero(mask[1:] != mask[:-1]) + 1
    starts = np.concatenate(([0], change)).astype(np.int64)
    ends = np.concatenate((change, [mask.size])).astype(np.int64)
    return starts, ends - starts, mask[starts]


def silent_runs(mask: np.ndarray) -> list[tuple[int, int]]:
    starts, lengths, values = _runs(mask)
    return [(int(s), int(s + n)) for s, n, v in zip(starts, lengths, values) if v]


def _trim(samples: np.ndarray, threshold: float, min_silence_samples: int) -> np.ndarray:
    samples = np.asarray(samples, dtype=np.float32).reshape(-1)
    if samples.size == 0:
        return samples

    starts, lengths, silent = _runs(silent_mask(samples, threshold))
    trailing = (starts + lengths) == samples.size
    # Short pauses survive only when speech follows them; the tail run never does.
    keep_run = ~silent | ((lengths < int(min_silence_samples)) & ~trailing)
    keep = np.repeat(keep_run, lengths)
    return samples[keep]


@overload
def trim_silence(audio: PCMBuffer, threshold: float = ..., min_silence_samples: int = ...) -> PCMBuffer: ...


@overload
def trim_silence(audio: np.ndarray, threshold: float = ..., min_silence_samples: int = ...) -> np.ndarray: ...


def trim_silence(
    audio: Union[PCMBuffer, np.ndarray],
    threshold: float = 0.01,
    min_silence_samples: int = 32000,
) -> Union[PCMBuffer, np.ndarray]:
    """Drop silent runs of at least ``min_silence_samples`` and any trailing silence.

    Shorter interior pauses are kept verbatim so speech rhythm is preserved.
    """
    if isinstance(audio, PCMBuffer):
        return PCMBuffer(
            samples=_trim(audio.samples, threshold, min_silence_samples),
            sample_rate=int(audio.sample_rate),
        )
    return _trim(audio, threshold, min_silence_samples)
