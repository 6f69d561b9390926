"""Tests for config loading and validation."""

import json

import pytest

from wavepeaks.config import DEFAULT_SAMPLE_COUNT, WaveformConfig, load_config


class TestWaveformConfig:
    def test_defaults(self):
        cfg = WaveformConfig()
        assert cfg.samples == DEFAULT_SAMPLE_COUNT == 1200
        assert cfg.ffmpeg_bin == "ffmpeg"
        assert cfg.ffprobe_bin == "ffprobe"
        assert cfg.chunk_size == 65536

    def test_custom_values(self):
        cfg = WaveformConfig(samples=300, ffmpeg_bin="/opt/bin/ffmpeg")
        assert cfg.samples == 300
        assert cfg.ffmpeg_bin == "/opt/bin/ffmpeg"

    @pytest.mark.parametrize("field", ["samples", "chunk_size"])
    def test_rejects_non_positive(self, field):
        with pytest.raises(ValueError, match=field):
            WaveformConfig(**{field: 0})


class TestLoadConfig:
    def test_full(self, tmp_path):
        path = tmp_path / "wavepeaks.json"
        path.write_text(json.dumps({
            "samples": 600,
            "ffmpeg_bin": "ffmpeg6",
            "ffprobe_bin": "ffprobe6",
            "chunk_size": 4096,
        }))
        cfg = load_config(path)
        assert cfg == WaveformConfig(
            samples=600, ffmpeg_bin="ffmpeg6", ffprobe_bin="ffprobe6", chunk_size=4096
        )

    def test_partial_uses_defaults(self, tmp_path):
        path = tmp_path / "wavepeaks.json"
        path.write_text(json.dumps({"samples": 50}))
        cfg = load_config(str(path))
        assert cfg.samples == 50
        assert cfg.ffmpeg_bin == "ffmpeg"

    def test_unknown_keys_rejected(self, tmp_path):
        path = tmp_path / "wavepeaks.json"
        path.write_text(json.dumps({"samples": 50, "peak_type": "max"}))
        with pytest.raises(ValueError, match="peak_type"):
            load_config(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "wavepeaks.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="JSON object"):
            load_config(path)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "wavepeaks.json"
        path.write_text(json.dumps({"samples": 0}))
        with pytest.raises(ValueError):
            load_config(path)
