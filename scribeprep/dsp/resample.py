from __future__ import annotations

import math

import numpy as np


def target_length(num_samples: int, orig_sr: int, target_sr: int) -> int:
    # ceil(duration * target_sr) without going through float seconds
    return -(-int(num_samples) * int(target_sr) // int(orig_sr))


def resample_audio(audio: np.ndarray, orig_sr: int, target_sr: int) -> np.ndarray:
    audio = audio.astype(np.float32, copy=False)
    if int(orig_sr) <= 0 or int(target_sr) <= 0:
        raise ValueError(f"Sample rates must be positive, got orig_sr={orig_sr}, target_sr={target_sr}")
    if int(orig_sr) == int(target_sr):
        return audio

    try:
        from scipy.signal import resample_poly  # type: ignore
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("scipy is required for resampling") from exc

    orig_sr_i = int(orig_sr)
    target_sr_i = int(target_sr)
    g = math.gcd(orig_sr_i, target_sr_i)
    up = target_sr_i // g
    down = orig_sr_i // g

    if audio.size == 0:
        return audio

    out = resample_poly(audio, up=up, down=down).astype(np.float32, copy=False)

    n_out = target_length(audio.size, orig_sr_i, target_sr_i)
    if out.size > n_out:
        out = out[:n_out]
    elif out.size < n_out:
        out = np.pad(out, (0, n_out - out.size))
    return out
