from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from scribeprep.errors import DecodeError


@dataclass(frozen=True)
class AudioCapture:
    data: bytes
    format: Optional[str] = None  # webm | m4a | mp3 | wav | ... (None = sniff)

    @classmethod
    def from_path(cls, path: Path) -> "AudioCapture":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(str(path))
        if not path.is_file():
            raise DecodeError(f"Not a regular audio file: {path}")
        suffix = path.suffix.lower().lstrip(".")
        return cls(data=path.read_bytes(), format=suffix or None)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Segment:
    start_sample: int
    end_sample: int
    samples: np.ndarray

    @property
    def num_samples(self) -> int:
        return int(self.end_sample - self.start_sample)

    def duration_sec(self, sample_rate: int) -> float:
        return float(self.num_samples) / float(sample_rate)


@dataclass(frozen=True)
class EncodedChunk:
    index: int
    data: bytes  # canonical PCM16 mono WAV
    start_sample: int
    end_sample: int
    sample_rate: int

    mime_type = "audio/wav"
    filename = "audio.wav"

    @property
    def duration_sec(self) -> float:
        return float(self.end_sample - self.start_sample) / float(self.sample_rate)


@dataclass(frozen=True)
class PreprocessSummary:
    source_sample_rate: int
    source_channels: int
    decoded_duration_sec: float
    trimmed_duration_sec: float
    num_chunks: int
    chunk_durations_sec: list[float]


@dataclass(frozen=True)
class PreprocessResult:
    sample_rate: int
    chunks: list[EncodedChunk]
    summary: PreprocessSummary
