#!/usr/bin/env python3
"""Generate a synthetic test recording for wavepeaks.

Produces a 12-second stereo WAV with alternating loud, quiet and silent
sections, so the waveform has an obvious shape:
  0-3s   440 Hz tone, full volume
  3-6s   silence
  6-9s   880 Hz tone, quarter volume
  9-12s  440 Hz tone, full volume
"""

import subprocess
import sys
from pathlib import Path


def generate_test_audio(output: Path, sample_rate: int = 44100) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)

    audio_filter = (
        f"sine=f=440:d=3:r={sample_rate}[a0];"
        f"anullsrc=d=3:r={sample_rate}:cl=mono[s0];"
        f"sine=f=880:d=3:r={sample_rate},volume=0.25[a1];"
        f"sine=f=440:d=3:r={sample_rate}[a2];"
        "[a0][s0][a1][a2]concat=n=4:v=0:a=1,pan=stereo|c0=c0|c1=c0[aout]"
    )

    cmd = [
        "ffmpeg", "-y",
        "-filter_complex", audio_filter,
        "-map", "[aout]",
        "-c:a", "pcm_s16le",
        str(output),
    ]
    subprocess.run(cmd, check=True)
    print(f"Generated: {output}")


if __name__ == "__main__":
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("tests/fixtures/synthetic.wav")
    generate_test_audio(out)
