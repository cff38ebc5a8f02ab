from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from scribeprep.errors import ConfigError


@dataclass(frozen=True)
class PreprocessConfig:
    target_sample_rate: int = 16000
    max_chunk_sec: float = 600.0
    silence_threshold: float = 0.01
    min_silence_sec: float = 2.0
    boundary_window_sec: float = 0.3
    boundary_radius_sec: float = 5.0
    min_chunk_sec: float = 1.0


@dataclass(frozen=True)
class TranscriberConfig:
    provider: str = "openai"  # openai | gemini
    api_key: str = ""
    model: str = ""  # empty = provider default
    prompt: str = ""
    temperature: float = 0.1
    max_retries: int = 2
    timeout_sec: float = 300.0


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    preprocess: PreprocessConfig = PreprocessConfig()
    transcriber: TranscriberConfig = TranscriberConfig()
    logging: LoggingConfig = LoggingConfig()

    def with_max_chunk_sec(self, max_chunk_sec: float) -> "AppConfig":
        return replace(self, preprocess=replace(self.preprocess, max_chunk_sec=float(max_chunk_sec)))

    def with_provider(self, provider: str) -> "AppConfig":
        return replace(self, transcriber=replace(self.transcriber, provider=str(provider)))


def _get(d: dict[str, Any], key: str, default: Any) -> Any:
    value = d.get(key, default)
    return default if value is None else value


def load_config(path: Path) -> AppConfig:
    path = Path(path)
    if not path.exists():
        return AppConfig()

    try:
        import yaml  # type: ignore
    except Exception as exc:  # pragma: no cover
        raise ConfigError("PyYAML is required to read config.yaml") from exc

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        return AppConfig()

    pre_raw = raw.get("preprocess", {}) or {}
    tr_raw = raw.get("transcriber", {}) or {}
    log_raw = raw.get("logging", {}) or {}

    defaults = AppConfig()
    pre = defaults.preprocess
    tr = defaults.transcriber

    try:
        return AppConfig(
            preprocess=PreprocessConfig(
                target_sample_rate=int(_get(pre_raw, "target_sample_rate", pre.target_sample_rate)),
                max_chunk_sec=float(_get(pre_raw, "max_chunk_sec", pre.max_chunk_sec)),
                silence_threshold=float(_get(pre_raw, "silence_threshold", pre.silence_threshold)),
                min_silence_sec=float(_get(pre_raw, "min_silence_sec", pre.min_silence_sec)),
                boundary_window_sec=float(_get(pre_raw, "boundary_window_sec", pre.boundary_window_sec)),
                boundary_radius_sec=float(_get(pre_raw, "boundary_radius_sec", pre.boundary_radius_sec)),
                min_chunk_sec=float(_get(pre_raw, "min_chunk_sec", pre.min_chunk_sec)),
            ),
            transcriber=TranscriberConfig(
                provider=str(_get(tr_raw, "provider", tr.provider)).lower(),
                api_key=str(_get(tr_raw, "api_key", tr.api_key)),
                model=str(_get(tr_raw, "model", tr.model)),
                prompt=str(_get(tr_raw, "prompt", tr.prompt)),
                temperature=float(_get(tr_raw, "temperature", tr.temperature)),
                max_retries=int(_get(tr_raw, "max_retries", tr.max_retries)),
                timeout_sec=float(_get(tr_raw, "timeout_sec", tr.timeout_sec)),
            ),
            logging=LoggingConfig(
                level=str(_get(log_raw, "level", defaults.logging.level)).upper(),
            ),
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value in {path}: {exc}") from exc
