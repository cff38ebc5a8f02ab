from __future__ import annotations

import struct
from typing import Tuple

import numpy as np

from scribeprep.errors import DecodeError

WAV_HEADER_SIZE = 44
_PCM_FORMAT = 1
_BITS_PER_SAMPLE = 16
_CHANNELS = 1

# RIFF size, "WAVE", "fmt ", fmt size, format, channels, rate, byte rate, block align, bits, "data", data size
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def quantize_pcm16(samples: np.ndarray) -> np.ndarray:
    x = np.clip(np.asarray(samples, dtype=np.float64).reshape(-1), -1.0, 1.0)
    scaled = np.where(x < 0, x * 32768.0, x * 32767.0)
    # float -> int conversion truncates toward zero
    return scaled.astype(np.int16)


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    pcm = quantize_pcm16(samples)
    block_align = _CHANNELS * (_BITS_PER_SAMPLE // 8)
    data_size = int(pcm.size) * block_align
    header = _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        _PCM_FORMAT,
        _CHANNELS,
        int(sample_rate),
        int(sample_rate) * block_align,
        block_align,
        _BITS_PER_SAMPLE,
        b"data",
        data_size,
    )
    return header + pcm.astype("<i2", copy=False).tobytes()


def decode_wav(data: bytes) -> Tuple[np.ndarray, int]:
    if len(data) < WAV_HEADER_SIZE:
        raise DecodeError(f"WAV data too short ({len(data)} bytes)")

    (
        riff,
        _riff_size,
        wave,
        fmt_id,
        fmt_size,
        audio_format,
        channels,
        sample_rate,
        _byte_rate,
        _block_align,
        bits,
        data_id,
        data_size,
    ) = _HEADER.unpack_from(data, 0)

    if riff != b"RIFF" or wave != b"WAVE" or fmt_id != b"fmt " or data_id != b"data":
        raise DecodeError("Not a canonical RIFF/WAVE file")
    if fmt_size != 16 or audio_format != _PCM_FORMAT or channels != _CHANNELS or bits != _BITS_PER_SAMPLE:
        raise DecodeError(
            f"Unsupported WAV layout: format={audio_format}, channels={channels}, bits={bits}"
        )
    payload = data[WAV_HEADER_SIZE : WAV_HEADER_SIZE + int(data_size)]
    if len(payload) != int(data_size):
        raise DecodeError("WAV data chunk is truncated")
    return np.frombuffer(payload, dtype="<i2").astype(np.int16), int(sample_rate)
