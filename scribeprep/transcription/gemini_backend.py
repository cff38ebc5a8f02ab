from __future__ import annotations

import logging

from scribeprep.config import TranscriberConfig
from scribeprep.errors import TranscriptionError, UnsupportedPlatformError
from scribeprep.transcription.base import TranscriptionBackend
from scribeprep.types import EncodedChunk

LOGGER = logging.getLogger("scribeprep.transcription.gemini")

DEFAULT_PROMPT = (
    "Transcribe this audio verbatim in the language that is spoken. "
    "Return only the transcript text, without commentary."
)


class GeminiBackend(TranscriptionBackend):
    name = "gemini"
    default_model = "gemini-2.0-flash"
    api_key_env = "GEMINI_API_KEY"

    def __init__(self) -> None:
        try:
            import google.generativeai as genai  # type: ignore
        except Exception as exc:  # pragma: no cover
            raise UnsupportedPlatformError(
                "provider=gemini requires `google-generativeai`; install it with pip."
            ) from exc
        self._genai = genai

    def transcribe(self, chunk: EncodedChunk, config: TranscriberConfig) -> str:
        genai = self._genai
        genai.configure(api_key=self.api_key_for(config))
        model = genai.GenerativeModel(self.model_for(config))

        try:
            response = model.generate_content(
                [config.prompt or DEFAULT_PROMPT, {"mime_type": chunk.mime_type, "data": chunk.data}],
                generation_config={"temperature": float(config.temperature)},
                request_options={"timeout": float(config.timeout_sec)},
            )
        except Exception as exc:
            raise TranscriptionError(f"Gemini transcription error: {exc}") from exc

        if not getattr(response, "candidates", None):
            LOGGER.warning("Chunk %d: Gemini returned no candidates (no speech detected?)", chunk.index)
            return ""
        try:
            return str(response.text or "")
        except ValueError as exc:
            # .text raises when the candidate was blocked or has no text parts
            raise TranscriptionError(f"Gemini returned no usable text: {exc}") from exc
