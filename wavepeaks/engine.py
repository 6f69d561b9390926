"""Orchestrator — resolves, probes and reduces a media reference into a waveform."""

import asyncio
import logging

from wavepeaks import ffutil
from wavepeaks.analyzers.waveform import compute_peaks
from wavepeaks.config import DEFAULT_SAMPLE_COUNT, WaveformConfig
from wavepeaks.models import Absent, Present, WaveformMetadata, WaveformOutcome
from wavepeaks.resolver import resolve_media_input

logger = logging.getLogger(__name__)


async def compute_waveform(
    media_ref: str,
    samples: int = DEFAULT_SAMPLE_COUNT,
    config: WaveformConfig | None = None,
) -> WaveformOutcome:
    """Extract a *samples*-point RMS waveform from *media_ref*.

    Returns Absent when the media cannot be probed (not audio, unreadable,
    missing). Decode problems after a successful probe still yield a
    Present outcome, with an all-zero waveform in the worst case.

    Args:
        media_ref: http(s) URL, absolute path, or path relative to the cwd.
        samples: Number of points in the returned waveform.
        config: Binaries and read chunk size; defaults if omitted.
    """
    if samples < 1:
        raise ValueError(f"samples must be >= 1, got {samples}")
    config = config or WaveformConfig()

    input_ref = resolve_media_input(media_ref)
    logger.debug("Resolved %r to %r", media_ref, input_ref)

    try:
        probe = await ffutil.probe_audio(input_ref, ffprobe_bin=config.ffprobe_bin)
    except ffutil.ProbeError as e:
        logger.warning("Audio probe failed for %s: %s", input_ref, e)
        return Absent(reason=str(e))
    logger.debug("Probed %s: %s", input_ref, probe)

    peaks = await compute_peaks(
        input_ref,
        probe,
        samples=samples,
        ffmpeg_bin=config.ffmpeg_bin,
        chunk_size=config.chunk_size,
    )

    return Present(
        WaveformMetadata(
            duration_ms=round(probe.duration_sec * 1000),
            samples=samples,
            peaks=tuple(peaks),
        )
    )


def compute_waveform_blocking(
    media_ref: str,
    samples: int = DEFAULT_SAMPLE_COUNT,
    config: WaveformConfig | None = None,
) -> WaveformOutcome:
    """Synchronous wrapper around compute_waveform for CLI and WSGI callers."""
    return asyncio.run(compute_waveform(media_ref, samples=samples, config=config))


def attach_waveform(
    metadata: object,
    media_ref: str,
    samples: int = DEFAULT_SAMPLE_COUNT,
    config: WaveformConfig | None = None,
) -> dict:
    """Return a copy of *metadata* with a ``waveform`` entry for *media_ref*.

    An existing ``waveform`` entry is kept as-is and nothing is decoded.
    When the media cannot be probed the copy is returned without one.
    Non-dict metadata is treated as empty.
    """
    result = dict(metadata) if isinstance(metadata, dict) else {}
    if result.get("waveform"):
        return result

    outcome = compute_waveform_blocking(media_ref, samples=samples, config=config)
    if isinstance(outcome, Present):
        result["waveform"] = outcome.metadata.to_dict()
    return result
