from __future__ import annotations

import logging
from typing import Iterable, Optional

from scribeprep.config import AppConfig, TranscriberConfig
from scribeprep.errors import TranscriptionError
from scribeprep.pipeline import CancelToken, ProgressCallback, preprocess_capture
from scribeprep.transcription.base import TranscriptionBackend
from scribeprep.transcription.gemini_backend import GeminiBackend
from scribeprep.transcription.openai_backend import OpenAIBackend
from scribeprep.types import AudioCapture, EncodedChunk, PreprocessResult

LOGGER = logging.getLogger("scribeprep.transcription")

BACKENDS: dict[str, type[TranscriptionBackend]] = {
    "openai": OpenAIBackend,
    "gemini": GeminiBackend,
}


def create_backend(config: TranscriberConfig) -> TranscriptionBackend:
    provider = str(config.provider).lower()
    backend_cls = BACKENDS.get(provider)
    if backend_cls is None:
        raise TranscriptionError(f"Unsupported transcription provider: {config.provider}")
    return backend_cls()


def transcribe_chunks(
    chunks: Iterable[EncodedChunk],
    backend: TranscriptionBackend,
    config: TranscriberConfig,
    *,
    cancel: Optional[CancelToken] = None,
) -> str:
    # Fragments are joined as-is; punctuation between chunks is left to the provider.
    parts: list[str] = []
    for chunk in chunks:
        if cancel is not None:
            cancel.raise_if_cancelled()
        LOGGER.info("Transcribing chunk %d (%.1fs) via %s", chunk.index + 1, chunk.duration_sec, backend.name)
        parts.append(backend.transcribe(chunk, config))
    return "".join(parts)


class TranscriberService:
    def __init__(self, backend: Optional[TranscriptionBackend] = None) -> None:
        self._backend = backend

    def backend_for(self, config: TranscriberConfig) -> TranscriptionBackend:
        if self._backend is not None:
            return self._backend
        return create_backend(config)

    def transcribe(
        self,
        capture: AudioCapture,
        config: AppConfig,
        *,
        cancel: Optional[CancelToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> str:
        backend = self.backend_for(config.transcriber)
        # Fail on a missing key before spending time on decoding.
        backend.api_key_for(config.transcriber)

        result = preprocess_capture(capture, config.preprocess, progress=progress, cancel=cancel)
        return self.transcribe_prepared(result, config, backend=backend, cancel=cancel)

    def transcribe_prepared(
        self,
        result: PreprocessResult,
        config: AppConfig,
        *,
        backend: Optional[TranscriptionBackend] = None,
        cancel: Optional[CancelToken] = None,
    ) -> str:
        backend = backend or self.backend_for(config.transcriber)
        if not result.chunks:
            LOGGER.warning("No audible speech left after silence trimming; nothing to transcribe")
            return ""
        return transcribe_chunks(result.chunks, backend, config.transcriber, cancel=cancel)
