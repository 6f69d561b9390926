"""Windowed RMS downsampling of a decoded audio stream."""

import logging
import math
from contextlib import aclosing
from typing import AsyncIterable

import numpy as np

from wavepeaks import ffutil
from wavepeaks.config import DEFAULT_SAMPLE_COUNT
from wavepeaks.models import ProbeResult, ReducerState, WindowAccumulator

logger = logging.getLogger(__name__)


def window_size_for(probe: ProbeResult, samples: int) -> int:
    """Number of decoded samples folded into each output point."""
    total_samples = max(1, math.floor(probe.duration_sec * probe.sample_rate))
    return max(1, total_samples // samples)


def process_chunk(
    state: ReducerState, chunk: bytes, window_size: int, samples: int
) -> ReducerState:
    """Fold one stdout chunk into *state* and return the new state.

    Chunks need not be aligned to the sample width: trailing bytes that do
    not form a whole sample are carried into the next call. Processing stops
    as soon as *samples* points have been emitted.
    """
    data = state.carry + chunk
    usable = len(data) - len(data) % ffutil.SAMPLE_WIDTH
    carry = data[usable:]
    if usable == 0:
        return ReducerState(carry=carry, accumulator=state.accumulator, emitted=state.emitted)

    values = np.frombuffer(data, dtype="<f4", count=usable // ffutil.SAMPLE_WIDTH)
    values = values.astype(np.float64)
    # NaN/inf samples would poison the window's RMS.
    values[~np.isfinite(values)] = 0.0

    sum_sq = state.accumulator.sum_of_squares
    count = state.accumulator.count
    emitted = list(state.emitted)

    pos = 0
    while pos < len(values) and len(emitted) < samples:
        take = min(window_size - count, len(values) - pos)
        window = values[pos:pos + take]
        # Accumulate strictly left to right from the carried total so the
        # result does not depend on where chunk boundaries fall.
        running = np.cumsum(np.concatenate(([sum_sq], window * window)))
        sum_sq = float(running[-1])
        count += take
        pos += take
        if count == window_size:
            emitted.append(math.sqrt(sum_sq / count))
            sum_sq, count = 0.0, 0

    return ReducerState(
        carry=carry,
        accumulator=WindowAccumulator(sum_of_squares=sum_sq, count=count),
        emitted=tuple(emitted),
    )


def finalize_peaks(state: ReducerState, samples: int) -> list[float]:
    """Flush the partial window, pad to *samples* and normalize to [0, 1]."""
    points = list(state.emitted[:samples])
    acc = state.accumulator
    if len(points) < samples and acc.count > 0:
        points.append(math.sqrt(acc.sum_of_squares / acc.count))
    points.extend([0.0] * (samples - len(points)))

    max_rms = max(points, default=0.0)
    if max_rms <= 0:
        return [0.0] * samples
    return [min(1.0, p / max_rms) for p in points]


class WaveformReducer:
    """Single-consumer reducer over a stream of decoded f32le chunks."""

    def __init__(self, window_size: int, samples: int = DEFAULT_SAMPLE_COUNT):
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        if samples < 1:
            raise ValueError(f"samples must be >= 1, got {samples}")
        self.window_size = window_size
        self.samples = samples
        self.state = ReducerState()

    @property
    def full(self) -> bool:
        return len(self.state.emitted) >= self.samples

    def feed(self, chunk: bytes) -> bool:
        """Process one chunk; return True once enough points are collected."""
        self.state = process_chunk(self.state, chunk, self.window_size, self.samples)
        return self.full

    async def consume(self, chunks: AsyncIterable[bytes]) -> None:
        """Feed chunks in arrival order, stopping the moment the reducer is full."""
        if self.full:
            return
        async for chunk in chunks:
            if self.feed(chunk):
                return

    def peaks(self) -> list[float]:
        return finalize_peaks(self.state, self.samples)


async def compute_peaks(
    input_ref: str,
    probe: ProbeResult,
    samples: int = DEFAULT_SAMPLE_COUNT,
    ffmpeg_bin: str = "ffmpeg",
    chunk_size: int = 64 * 1024,
) -> list[float]:
    """Decode *input_ref* with ffmpeg and return *samples* normalized RMS peaks.

    The decoder is killed as soon as enough windows are gathered. Decoder
    failures are logged, never raised: whatever was accumulated up to that
    point is used, which is nothing (an all-zero waveform) if the spawn
    itself failed.
    """
    window_size = window_size_for(probe, samples)
    reducer = WaveformReducer(window_size, samples)
    logger.debug("Decoding %s with window size %d", input_ref, window_size)

    try:
        async with ffutil.open_decoder(input_ref, ffmpeg_bin) as proc:
            async with aclosing(ffutil.read_chunks(proc.stdout, chunk_size)) as chunks:
                await reducer.consume(chunks)
            if reducer.full:
                logger.debug("Collected %d windows, stopping decoder early", samples)
    except (OSError, ValueError) as e:
        logger.error("Audio decode failed for %s: %s", input_ref, e)

    return reducer.peaks()
