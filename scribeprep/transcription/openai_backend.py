from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from scribeprep.config import TranscriberConfig
from scribeprep.errors import TranscriptionError, UnsupportedPlatformError
from scribeprep.transcription.base import TranscriptionBackend
from scribeprep.types import EncodedChunk

LOGGER = logging.getLogger("scribeprep.transcription.openai")


class OpenAIBackend(TranscriptionBackend):
    name = "openai"
    default_model = "gpt-4o-transcribe"
    api_key_env = "OPENAI_API_KEY"

    def __init__(self, *, sleep: Callable[[float], None] = time.sleep) -> None:
        try:
            import openai  # type: ignore
        except Exception as exc:  # pragma: no cover
            raise UnsupportedPlatformError(
                "provider=openai requires the `openai` package; install it with pip."
            ) from exc

        self._openai = openai
        self._sleep = sleep
        self._client: Optional[Any] = None
        self._client_key: Optional[tuple[str, float]] = None

    def _client_for(self, api_key: str, timeout_sec: float) -> Any:
        key = (api_key, float(timeout_sec))
        if self._client is None or self._client_key != key:
            # Retries are handled here so backoff stays visible in our logs.
            self._client = self._openai.OpenAI(api_key=api_key, timeout=float(timeout_sec), max_retries=0)
            self._client_key = key
        return self._client

    def transcribe(self, chunk: EncodedChunk, config: TranscriberConfig) -> str:
        client = self._client_for(self.api_key_for(config), config.timeout_sec)
        kwargs: dict[str, Any] = {
            "model": self.model_for(config),
            "file": (chunk.filename, chunk.data, chunk.mime_type),
            "temperature": float(config.temperature),
        }
        if config.prompt:
            kwargs["prompt"] = str(config.prompt)

        openai = self._openai
        max_retries = max(0, int(config.max_retries))
        for attempt in range(max_retries + 1):
            try:
                response = client.audio.transcriptions.create(**kwargs)
                return str(getattr(response, "text", "") or "")
            except (openai.RateLimitError, openai.APIConnectionError) as exc:
                if attempt < max_retries:
                    wait = float(2**attempt)
                    LOGGER.warning(
                        "Chunk %d: %s, retrying in %.0fs (attempt %d/%d)",
                        chunk.index,
                        type(exc).__name__,
                        wait,
                        attempt + 1,
                        max_retries + 1,
                    )
                    self._sleep(wait)
                    continue
                raise TranscriptionError(
                    f"OpenAI transcription failed after {max_retries + 1} attempts: {exc}"
                ) from exc
            except openai.APIStatusError as exc:
                raise TranscriptionError(f"OpenAI transcription error: {exc.status_code} {exc.message}") from exc
            except openai.APIError as exc:
                raise TranscriptionError(f"OpenAI transcription error: {exc}") from exc

        raise TranscriptionError("OpenAI transcription did not run")  # pragma: no cover
