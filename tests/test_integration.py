"""End-to-end tests against the real ffmpeg/ffprobe binaries."""

import shutil
import subprocess

import pytest

from wavepeaks.engine import compute_waveform_blocking
from wavepeaks.models import Absent, Present

pytestmark = pytest.mark.skipif(
    shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
    reason="ffmpeg/ffprobe not installed",
)


@pytest.fixture
def tone(tmp_path):
    """Two seconds of a steady 440 Hz tone, stereo, 8 kHz."""
    path = tmp_path / "tone.wav"
    subprocess.run(
        [
            "ffmpeg", "-y", "-v", "error",
            "-f", "lavfi", "-i", "sine=f=440:d=2:r=8000",
            "-ac", "2",
            "-c:a", "pcm_s16le",
            str(path),
        ],
        check=True,
    )
    return path


class TestRealFFmpeg:
    def test_steady_tone(self, tone):
        outcome = compute_waveform_blocking(str(tone), samples=50)

        assert isinstance(outcome, Present)
        meta = outcome.metadata
        assert meta.duration_ms == 2000
        assert meta.samples == 50
        assert len(meta.peaks) == 50
        assert max(meta.peaks) == 1.0
        assert min(meta.peaks) > 0.9

    def test_relative_reference(self, tone, monkeypatch):
        monkeypatch.chdir(tone.parent)
        outcome = compute_waveform_blocking(tone.name, samples=8)
        assert isinstance(outcome, Present)
        assert len(outcome.metadata.peaks) == 8

    def test_more_points_than_samples(self, tone):
        outcome = compute_waveform_blocking(str(tone), samples=20000)
        peaks = outcome.metadata.peaks
        assert len(peaks) == 20000
        assert all(0.0 <= p <= 1.0 for p in peaks)

    def test_not_media(self, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("definitely not audio\n")
        assert isinstance(compute_waveform_blocking(str(notes)), Absent)

    def test_missing_file(self, tmp_path):
        assert isinstance(compute_waveform_blocking(str(tmp_path / "nope.mp3")), Absent)
