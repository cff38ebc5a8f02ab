from __future__ import annotations

import numpy as np

from scribeprep.audio.buffer import PCMBuffer
from scribeprep.dsp.resample import resample_audio


def to_mono(audio: np.ndarray) -> np.ndarray:
    if audio.ndim == 1:
        return audio.astype(np.float32, copy=False)
    if audio.ndim != 2:
        raise ValueError(f"Expected 1D/2D audio array, got shape={audio.shape}")
    if audio.shape[1] == 1:
        return audio[:, 0].astype(np.float32, copy=False)
    return audio.mean(axis=1).astype(np.float32, copy=False)


def render_pcm(audio: np.ndarray, orig_sr: int, target_sr: int = 16000) -> PCMBuffer:
    audio_mono = to_mono(audio)
    audio_rs = resample_audio(audio_mono, orig_sr=orig_sr, target_sr=target_sr)
    return PCMBuffer(samples=audio_rs, sample_rate=int(target_sr))
