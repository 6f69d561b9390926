"""FFmpeg/ffprobe subprocess helpers."""

import asyncio
import json
import logging
import math
import shutil
from contextlib import asynccontextmanager
from typing import AsyncIterator

from wavepeaks.models import ProbeResult

logger = logging.getLogger(__name__)

# Bytes per decoded sample (f32le).
SAMPLE_WIDTH = 4


class FFmpegNotFoundError(RuntimeError):
    pass


class ProbeError(RuntimeError):
    """Raised when ffprobe cannot report a usable duration and sample rate."""

    def __init__(
        self,
        message: str,
        stderr: str | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


def check_ffmpeg(ffmpeg_bin: str = "ffmpeg", ffprobe_bin: str = "ffprobe") -> None:
    """Raise FFmpegNotFoundError if ffmpeg/ffprobe are not on PATH."""
    for cmd in (ffmpeg_bin, ffprobe_bin):
        if shutil.which(cmd) is None:
            raise FFmpegNotFoundError(f"{cmd} not found on PATH")


def probe_command(input_ref: str, ffprobe_bin: str = "ffprobe") -> list[str]:
    """ffprobe invocation limited to the first audio stream's rate and the container duration."""
    return [
        ffprobe_bin,
        "-v", "error",
        "-select_streams", "a:0",
        "-show_entries", "stream=sample_rate",
        "-show_entries", "format=duration",
        "-of", "json",
        input_ref,
    ]


def parse_probe_output(stdout: str) -> ProbeResult:
    """Parse ffprobe's JSON report into a validated ProbeResult."""
    try:
        data = json.loads(stdout)
        duration = float(data["format"]["duration"])
        sample_rate = float(data["streams"][0]["sample_rate"])
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ProbeError(f"ffprobe returned unusable output: {e}") from e

    if not (math.isfinite(duration) and duration > 0):
        raise ProbeError(f"ffprobe returned invalid duration: {duration}")
    if not (math.isfinite(sample_rate) and sample_rate > 0):
        raise ProbeError(f"ffprobe returned invalid sample rate: {sample_rate}")

    return ProbeResult(duration_sec=duration, sample_rate=sample_rate)


async def probe_audio(input_ref: str, ffprobe_bin: str = "ffprobe") -> ProbeResult:
    """Run ffprobe on *input_ref* and return its duration and sample rate.

    Every failure mode (spawn error, non-zero exit, malformed report) is
    raised as ProbeError.
    """
    cmd = probe_command(input_ref, ffprobe_bin)
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (OSError, ValueError) as e:
        raise ProbeError(f"Failed to execute {ffprobe_bin}: {e}") from e

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        err = stderr.decode(errors="replace").strip()
        raise ProbeError(
            f"ffprobe failed ({proc.returncode}): {err}",
            stderr=err,
            returncode=proc.returncode,
        )

    return parse_probe_output(stdout.decode(errors="replace"))


def decode_command(input_ref: str, ffmpeg_bin: str = "ffmpeg") -> list[str]:
    """ffmpeg invocation emitting headerless mono f32le samples on stdout."""
    return [
        ffmpeg_bin,
        "-v", "error",
        "-i", input_ref,
        "-ac", "1",
        "-f", "f32le",
        "-acodec", "pcm_f32le",
        "-",
    ]


@asynccontextmanager
async def open_decoder(
    input_ref: str, ffmpeg_bin: str = "ffmpeg"
) -> AsyncIterator[asyncio.subprocess.Process]:
    """Spawn an ffmpeg decoder for *input_ref* and yield the process.

    If the block raises, or leaves before stdout reached EOF, the process is
    killed. After a full read it is only reaped, and a non-zero exit is
    logged. Spawn failures propagate as OSError or ValueError.
    """
    cmd = decode_command(input_ref, ffmpeg_bin)
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    # Drain stderr alongside stdout so a chatty decoder can never block on it.
    stderr_task = asyncio.ensure_future(proc.stderr.read())
    try:
        yield proc
    except BaseException:
        await _release_decoder(proc, stderr_task, kill=True)
        raise
    await _release_decoder(proc, stderr_task, kill=not proc.stdout.at_eof())


async def _release_decoder(
    proc: asyncio.subprocess.Process, stderr_task: asyncio.Future, kill: bool
) -> None:
    if kill and proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()
    stderr = await stderr_task

    if not kill and proc.returncode != 0:
        tail = stderr.decode(errors="replace").strip()[-500:]
        logger.warning("ffmpeg decode exited with %s: %s", proc.returncode, tail)


async def read_chunks(
    stream: asyncio.StreamReader, chunk_size: int
) -> AsyncIterator[bytes]:
    """Yield chunks from *stream* as they arrive until EOF."""
    while True:
        chunk = await stream.read(chunk_size)
        if not chunk:
            return
        yield chunk
