"""Runtime configuration for waveform extraction."""

import json
from dataclasses import dataclass, fields
from pathlib import Path

DEFAULT_SAMPLE_COUNT = 1200


@dataclass
class WaveformConfig:
    """Knobs shared by the CLI, the web service and library callers."""

    samples: int = DEFAULT_SAMPLE_COUNT
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"
    chunk_size: int = 64 * 1024

    def __post_init__(self) -> None:
        if self.samples < 1:
            raise ValueError(f"samples must be >= 1, got {self.samples}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")


def load_config(path: str | Path) -> WaveformConfig:
    """Load and validate a config from a JSON file."""
    path = Path(path)
    data = json.loads(path.read_text())

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a JSON object")

    known = {f.name for f in fields(WaveformConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    return WaveformConfig(**data)
