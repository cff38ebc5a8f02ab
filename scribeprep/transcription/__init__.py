__all__ = [
    "BACKENDS",
    "GeminiBackend",
    "OpenAIBackend",
    "TranscriberService",
    "TranscriptionBackend",
    "create_backend",
    "transcribe_chunks",
]

from scribeprep.transcription.base import TranscriptionBackend
from scribeprep.transcription.gemini_backend import GeminiBackend
from scribeprep.transcription.openai_backend import OpenAIBackend
from scribeprep.transcription.service import BACKENDS, TranscriberService, create_backend, transcribe_chunks
