from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from scribeprep.config import PreprocessConfig
from scribeprep.errors import ConfigError
from scribeprep.silence import silent_mask
from scribeprep.types import Segment

LOGGER = logging.getLogger("scribeprep.chunking")


def _sec_to_samples(sec: float, sample_rate: int) -> int:
    return int(round(float(sec) * float(sample_rate)))


@dataclass(frozen=True)
class ChunkParams:
    max_samples: int
    window_samples: int
    radius_samples: int
    min_samples: int
    silence_threshold: float


def chunk_params(*, sample_rate: int, config: PreprocessConfig) -> ChunkParams:
    max_samples = _sec_to_samples(config.max_chunk_sec, sample_rate)
    window_samples = _sec_to_samples(config.boundary_window_sec, sample_rate)
    if max_samples <= 0:
        raise ConfigError(f"max_chunk_sec must be positive (got {config.max_chunk_sec})")
    if window_samples <= 0:
        raise ConfigError(f"boundary_window_sec must be positive (got {config.boundary_window_sec})")
    return ChunkParams(
        max_samples=max_samples,
        window_samples=window_samples,
        radius_samples=max(0, _sec_to_samples(config.boundary_radius_sec, sample_rate)),
        min_samples=max(0, _sec_to_samples(config.min_chunk_sec, sample_rate)),
        silence_threshold=float(config.silence_threshold),
    )


def find_cut_point(samples: np.ndarray, *, start: int, desired: int, params: ChunkParams) -> int:
    """Move ``desired`` onto a nearby fully-silent window, preferring earlier cuts.

    Returns ``desired`` unchanged when no silent window lies within the search
    radius, or when the snapped cut would not advance past ``start``.
    """
    total = int(samples.size)
    w = int(params.window_samples)
    backward_start = max(w, desired - params.radius_samples)
    forward_end = min(total, desired + params.radius_samples)

    lo = max(0, backward_start - w)
    hi = min(total, max(desired, forward_end - 1 + w))
    loud = ~silent_mask(samples[lo:hi], params.silence_threshold)
    # loud_cum[k] = number of loud samples in samples[lo : lo + k]
    loud_cum = np.concatenate(([0], np.cumsum(loud, dtype=np.int64)))

    cut: Optional[int] = None
    if backward_start <= desired:
        ends = np.arange(backward_start, desired + 1, dtype=np.int64)
        ok = (loud_cum[ends - lo] - loud_cum[ends - w - lo]) == 0
        hits = np.flatnonzero(ok)
        if hits.size:
            cut = int(ends[hits[-1]]) - w

    if cut is None and desired < forward_end:
        begins = np.arange(desired, forward_end, dtype=np.int64)
        stops = np.minimum(begins + w, total)
        ok = (loud_cum[stops - lo] - loud_cum[begins - lo]) == 0
        hits = np.flatnonzero(ok)
        if hits.size:
            cut = int(begins[hits[0]])

    if cut is not None and cut > start:
        return cut
    return int(desired)


SegmentCallback = Callable[[Segment], None]


def split_segments(
    samples: np.ndarray,
    params: ChunkParams,
    *,
    on_segment: Optional[SegmentCallback] = None,
) -> list[Segment]:
    samples = np.asarray(samples, dtype=np.float32).reshape(-1)
    total = int(samples.size)

    segments: list[Segment] = []
    start = 0
    while start < total:
        end = min(start + params.max_samples, total)
        if end < total:
            naive = end
            end = find_cut_point(samples, start=start, desired=naive, params=params)
            LOGGER.debug("Cut at sample %d (naive %d, shift %+d)", end, naive, end - naive)

        if end - start >= params.min_samples:
            segment = Segment(start_sample=start, end_sample=end, samples=samples[start:end].copy())
            segments.append(segment)
            if on_segment is not None:
                on_segment(segment)
        else:
            LOGGER.debug("Dropped %d-sample fragment at %d (below minimum)", end - start, start)
        start = end

    return segments
