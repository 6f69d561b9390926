"""Turn a media reference into something ffprobe and ffmpeg can open."""

import os
import re
from pathlib import Path

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


def resolve_media_input(reference: str) -> str:
    """Return a URL or filesystem path for *reference*.

    URLs pass through untouched. Absolute paths that exist are kept; a
    missing root-anchored path such as ``/uploads/a.mp3`` is treated as
    relative to the working directory. Everything else is joined to the
    working directory. Never raises.
    """
    if is_url(reference):
        return reference

    if os.path.isabs(reference):
        if os.path.exists(reference):
            return reference
        if reference.startswith(os.sep):
            return str(Path.cwd() / reference[1:])
        return str(Path.cwd() / reference)

    return str(Path.cwd() / reference)


def is_url(reference: str) -> bool:
    """True for http(s) URLs, which are passed to ffmpeg untouched."""
    return bool(_URL_RE.match(reference))
