"""Thin CLI entry point — builds a config and calls the engine."""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from wavepeaks import ffutil
from wavepeaks.config import WaveformConfig, load_config
from wavepeaks.engine import compute_waveform_blocking
from wavepeaks.models import Absent


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="wavepeaks",
        description="wavepeaks — fixed-length RMS waveforms for audio and video files.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    comp = sub.add_parser("compute", help="Compute the waveform of a media file or URL")
    comp.add_argument("media", help="Media URL, absolute path, or path relative to the cwd")
    comp.add_argument("--config", "-c", type=Path, help="Path to a JSON config file")
    comp.add_argument("--samples", "-n", type=int, help="Number of waveform points")
    comp.add_argument("--output", "-o", type=Path, help="Write JSON here instead of stdout")
    comp.add_argument("--ffmpeg", type=str, help="ffmpeg binary")
    comp.add_argument("--ffprobe", type=str, help="ffprobe binary")

    serve = sub.add_parser("serve", help="Launch the web service")
    serve.add_argument("--config", "-c", type=Path, help="Path to a JSON config file")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")
    serve.add_argument(
        "--allow-local-media",
        action="store_true",
        help="Accept server-side file paths as media_url (trusted clients only)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        config = load_config(args.config) if args.config else WaveformConfig()
        if args.command == "compute":
            overrides = {
                "samples": args.samples,
                "ffmpeg_bin": args.ffmpeg,
                "ffprobe_bin": args.ffprobe,
            }
            config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
    except (OSError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    if args.command == "serve":
        from wavepeaks.web import create_app
        app = create_app(config=config, allow_local_media=args.allow_local_media)
        print(f"wavepeaks web service: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    try:
        ffutil.check_ffmpeg(config.ffmpeg_bin, config.ffprobe_bin)
    except ffutil.FFmpegNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    outcome = compute_waveform_blocking(args.media, samples=config.samples, config=config)
    if isinstance(outcome, Absent):
        print(f"No waveform: {outcome.reason}", file=sys.stderr)
        sys.exit(1)

    payload = json.dumps(outcome.metadata.to_dict())
    if args.output:
        args.output.write_text(payload)
        print(f"Waveform written to {args.output}")
    else:
        print(payload)
