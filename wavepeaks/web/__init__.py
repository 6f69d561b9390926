"""Flask application factory for the wavepeaks web service."""

import tempfile
from pathlib import Path

from flask import Flask, jsonify

from wavepeaks.config import WaveformConfig


def create_app(
    config: WaveformConfig | None = None,
    work_dir: Path | None = None,
    allow_local_media: bool = False,
) -> Flask:
    app = Flask(__name__)
    app.config["WAVEFORM"] = config or WaveformConfig()
    # When False, request bodies may only name http(s) URLs; local files go through /api/upload.
    app.config["ALLOW_LOCAL_MEDIA"] = allow_local_media
    app.config["WORK_DIR"] = work_dir or Path(tempfile.mkdtemp(prefix="wavepeaks_"))
    app.config["MAX_CONTENT_LENGTH"] = 2 * 1024 * 1024 * 1024  # 2 GB

    from wavepeaks.web.routes import bp
    app.register_blueprint(bp)

    @app.errorhandler(413)
    def request_entity_too_large(error):
        return jsonify({"error": "File too large"}), 413

    return app
