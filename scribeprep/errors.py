from __future__ import annotations


class ScribePrepError(RuntimeError):
    pass


class DecodeError(ScribePrepError):
    """Input bytes could not be decoded as audio."""


class UnsupportedPlatformError(ScribePrepError):
    """A required audio decoding/capture capability is missing in this runtime."""


class PipelineCancelled(ScribePrepError):
    pass


class ConfigError(ScribePrepError):
    pass


class TranscriptionError(ScribePrepError):
    pass
