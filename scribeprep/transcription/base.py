from __future__ import annotations

import os
from abc import ABC, abstractmethod

from scribeprep.config import TranscriberConfig
from scribeprep.errors import ConfigError
from scribeprep.types import EncodedChunk


class TranscriptionBackend(ABC):
    name: str = ""
    default_model: str = ""
    api_key_env: str = ""

    def model_for(self, config: TranscriberConfig) -> str:
        return str(config.model or self.default_model)

    def api_key_for(self, config: TranscriberConfig) -> str:
        key = str(config.api_key or os.getenv(self.api_key_env, "") or "")
        if not key:
            raise ConfigError(
                f"Transcriber API key is not configured (set transcriber.api_key or {self.api_key_env})."
            )
        return key

    @abstractmethod
    def transcribe(self, chunk: EncodedChunk, config: TranscriberConfig) -> str:
        raise NotImplementedError
