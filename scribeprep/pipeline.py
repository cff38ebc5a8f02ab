from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from scribeprep.audio.decoder import decode_audio
from scribeprep.chunking import chunk_params, split_segments
from scribeprep.config import PreprocessConfig
from scribeprep.errors import PipelineCancelled
from scribeprep.preprocess import render_pcm
from scribeprep.silence import trim_silence
from scribeprep.types import AudioCapture, EncodedChunk, PreprocessResult, PreprocessSummary
from scribeprep.wav import encode_wav

LOGGER = logging.getLogger("scribeprep.pipeline")

ProgressCallback = Callable[[int, int], None]


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PipelineCancelled("Preprocessing was cancelled.")


def _check(cancel: Optional[CancelToken]) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()


def preprocess_capture(
    capture: AudioCapture,
    config: PreprocessConfig,
    *,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancelToken] = None,
) -> PreprocessResult:
    """Decode, resample, trim and split a capture into ordered WAV chunks.

    Stages run strictly in sequence; the first failure aborts the whole call
    and nothing is returned.
    """
    target_sr = int(config.target_sample_rate)

    _check(cancel)
    audio, orig_sr = decode_audio(capture)
    channels = int(audio.shape[1]) if audio.ndim == 2 else 1

    _check(cancel)
    pcm = render_pcm(audio, orig_sr=orig_sr, target_sr=target_sr)
    LOGGER.info(
        "Decoded %.2fs of audio (%d Hz, %d ch) -> %d samples at %d Hz",
        pcm.duration_sec,
        orig_sr,
        channels,
        pcm.num_samples,
        target_sr,
    )

    _check(cancel)
    min_silence_samples = int(round(float(config.min_silence_sec) * target_sr))
    trimmed = trim_silence(pcm, threshold=float(config.silence_threshold), min_silence_samples=min_silence_samples)
    LOGGER.info("Silence trimming kept %.2fs of %.2fs", trimmed.duration_sec, pcm.duration_sec)

    _check(cancel)
    params = chunk_params(sample_rate=target_sr, config=config)
    segments = split_segments(trimmed.samples, params)

    chunks: list[EncodedChunk] = []
    total = len(segments)
    for index, segment in enumerate(segments):
        _check(cancel)
        chunks.append(
            EncodedChunk(
                index=index,
                data=encode_wav(segment.samples, target_sr),
                start_sample=segment.start_sample,
                end_sample=segment.end_sample,
                sample_rate=target_sr,
            )
        )
        if progress is not None:
            progress(index + 1, total)

    LOGGER.info("Prepared %d chunk(s) (max %.0fs each)", len(chunks), float(config.max_chunk_sec))

    summary = PreprocessSummary(
        source_sample_rate=int(orig_sr),
        source_channels=channels,
        decoded_duration_sec=float(pcm.duration_sec),
        trimmed_duration_sec=float(trimmed.duration_sec),
        num_chunks=len(chunks),
        chunk_durations_sec=[float(c.duration_sec) for c in chunks],
    )
    return PreprocessResult(sample_rate=target_sr, chunks=chunks, summary=summary)
