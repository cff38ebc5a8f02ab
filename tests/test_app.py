import io

import numpy as np
import pytest

import app

sf = pytest.importorskip("soundfile")


def _write_tone(path, seconds: float, sr: int = 22_050) -> None:
    t = np.arange(int(seconds * sr)) / sr
    sf.write(str(path), (0.4 * np.sin(2 * np.pi * 300 * t)).astype(np.float32), sr)


def test_preprocess_only_prints_summary(tmp_path, capsys):
    audio = tmp_path / "memo.wav"
    _write_tone(audio, 3.0)
    code = app.main([str(audio), "--preprocess-only", "--config", str(tmp_path / "none.yaml")])
    assert code == 0
    out = capsys.readouterr().out
    assert "chunks: 1" in out
    assert "22050 Hz, 1 ch" in out


def test_dump_chunks_writes_wav_files(tmp_path):
    audio = tmp_path / "memo.wav"
    _write_tone(audio, 5.0)
    out_dir = tmp_path / "chunks"
    code = app.main(
        [
            str(audio),
            "--preprocess-only",
            "--max-chunk-sec",
            "2",
            "--dump-chunks",
            str(out_dir),
            "--config",
            str(tmp_path / "none.yaml"),
        ]
    )
    assert code == 0
    files = sorted(p.name for p in out_dir.iterdir())
    assert files == ["memo_chunk001.wav", "memo_chunk002.wav", "memo_chunk003.wav"]
    data, sr = sf.read(io.BytesIO((out_dir / files[0]).read_bytes()))
    assert sr == 16_000
    assert data.shape == (32_000,)


def test_missing_audio_file_exits_with_error(tmp_path):
    assert app.main([str(tmp_path / "nope.webm"), "--config", str(tmp_path / "none.yaml")]) == 1


def test_missing_api_key_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(app.TranscriberService, "backend_for", lambda self, cfg: _KeylessBackend())
    audio = tmp_path / "memo.wav"
    _write_tone(audio, 2.0)
    assert app.main([str(audio), "--config", str(tmp_path / "none.yaml")]) == 1


class _KeylessBackend:
    name = "keyless"

    def api_key_for(self, config):
        from scribeprep.errors import ConfigError

        raise ConfigError("no key")


def test_non_positive_max_chunk_sec_exits_with_error(tmp_path):
    audio = tmp_path / "memo.wav"
    _write_tone(audio, 2.0)
    args = [str(audio), "--preprocess-only", "--max-chunk-sec", "0", "--config", str(tmp_path / "none.yaml")]
    assert app.main(args) == 1


def test_malformed_config_value_exits_with_error(tmp_path):
    audio = tmp_path / "memo.wav"
    _write_tone(audio, 2.0)
    config = tmp_path / "config.yaml"
    config.write_text("preprocess:\n  max_chunk_sec: ten\n", encoding="utf-8")
    assert app.main([str(audio), "--preprocess-only", "--config", str(config)]) == 1


def test_directory_instead_of_audio_file_exits_with_error(tmp_path):
    folder = tmp_path / "recordings.wav"
    folder.mkdir()
    assert app.main([str(folder), "--preprocess-only", "--config", str(tmp_path / "none.yaml")]) == 1
