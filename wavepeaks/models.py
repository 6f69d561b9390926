"""Shared data types used across wavepeaks."""

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class ProbeResult:
    """Container duration and source sample rate reported by ffprobe."""

    duration_sec: float
    sample_rate: float


@dataclass(frozen=True)
class WindowAccumulator:
    """Running sum of squares for the window currently being filled."""

    sum_of_squares: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class ReducerState:
    """Everything the reducer carries from one stdout chunk to the next."""

    carry: bytes = b""
    accumulator: WindowAccumulator = field(default_factory=WindowAccumulator)
    emitted: tuple[float, ...] = ()


@dataclass(frozen=True)
class WaveformMetadata:
    """A fixed-length, normalized RMS envelope of a media file."""

    duration_ms: int
    samples: int
    peaks: tuple[float, ...]
    peak_type: Literal["rms"] = "rms"

    def to_dict(self) -> dict:
        return {
            "durationMs": self.duration_ms,
            "samples": self.samples,
            "peakType": self.peak_type,
            "peaks": list(self.peaks),
        }


@dataclass(frozen=True)
class Present:
    """A waveform was extracted."""

    metadata: WaveformMetadata


@dataclass(frozen=True)
class Absent:
    """No waveform: the media could not be probed."""

    reason: str


WaveformOutcome = Present | Absent
