from __future__ import annotations

import io
import logging
from typing import Optional, Tuple

import numpy as np

from scribeprep.errors import DecodeError, UnsupportedPlatformError
from scribeprep.types import AudioCapture

LOGGER = logging.getLogger("scribeprep.decoder")

# Container names libsndfile knows under a different key (or not at all by suffix).
_SOUNDFILE_ALIASES = {
    "wave": "WAV",
    "oga": "OGG",
    "opus": "OGG",
    "aif": "AIFF",
}


def _soundfile_format(fmt: str) -> str:
    fmt_l = str(fmt).lower().lstrip(".")
    return _SOUNDFILE_ALIASES.get(fmt_l, fmt_l.upper())


def is_native_format(fmt: Optional[str]) -> bool:
    if not fmt:
        return False
    import soundfile as sf  # type: ignore

    return _soundfile_format(fmt) in sf.available_formats()


def _require_ffmpeg() -> None:
    try:
        from pydub.utils import which  # type: ignore
    except Exception as exc:
        raise UnsupportedPlatformError(
            "Decoding compressed audio (webm/m4a/mp3) requires `pydub` and ffmpeg."
        ) from exc
    if not (which("ffmpeg") or which("avconv")):
        raise UnsupportedPlatformError("ffmpeg executable not found on PATH; it is required by pydub.")


def ensure_decoder_support(fmt: Optional[str] = None) -> None:
    try:
        import soundfile  # type: ignore  # noqa: F401
        import scipy.signal  # type: ignore  # noqa: F401
    except Exception as exc:
        raise UnsupportedPlatformError(
            "Audio decoding requires `soundfile` and `scipy`; install the package dependencies."
        ) from exc

    if fmt and not is_native_format(fmt):
        _require_ffmpeg()


def _decode_with_soundfile(data: bytes) -> Tuple[np.ndarray, int]:
    import soundfile as sf  # type: ignore

    audio, sr = sf.read(io.BytesIO(data), always_2d=True, dtype="float32")
    return audio, int(sr)


def _decode_with_pydub(data: bytes, fmt: Optional[str]) -> Tuple[np.ndarray, int]:
    from pydub import AudioSegment  # type: ignore

    seg = AudioSegment.from_file(io.BytesIO(data), format=fmt)
    sr = int(seg.frame_rate)
    channels = max(1, int(seg.channels))

    samples = np.array(seg.get_array_of_samples())
    max_int = float(1 << (8 * seg.sample_width - 1))
    audio = (samples.astype(np.float32) / max_int).reshape((-1, channels))
    return audio, sr


def _require_samples(audio: np.ndarray, sr: int) -> None:
    if sr <= 0 or audio.size == 0:
        raise DecodeError("Decoded audio contains no samples.")


def decode_audio(capture: AudioCapture) -> Tuple[np.ndarray, int]:
    """Decode a capture into (frames, channels) float32 samples at the native rate."""
    if not capture.data:
        raise DecodeError("Audio capture is empty.")

    ensure_decoder_support(capture.format)

    try:
        audio, sr = _decode_with_soundfile(capture.data)
    except Exception as exc:
        sf_error = exc
    else:
        _require_samples(audio, sr)
        LOGGER.debug("Decoded %d bytes with soundfile (%d Hz, %d ch)", capture.size_bytes, sr, audio.shape[1])
        return audio, sr

    try:
        import pydub  # type: ignore  # noqa: F401
    except Exception as exc:
        raise DecodeError(
            f"Failed to decode audio with soundfile ({sf_error}); install ffmpeg and `pydub` for webm/m4a/mp3."
        ) from exc

    try:
        audio, sr = _decode_with_pydub(capture.data, capture.format)
    except Exception as exc:
        raise DecodeError(f"Failed to decode audio ({capture.format or 'unknown format'}): {exc}") from exc

    _require_samples(audio, sr)
    LOGGER.debug("Decoded %d bytes with pydub (%d Hz, %d ch)", capture.size_bytes, sr, audio.shape[1])
    return audio, sr
