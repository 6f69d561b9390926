"""HTTP routes for waveform extraction."""

import uuid
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request

from wavepeaks.engine import attach_waveform, compute_waveform_blocking
from wavepeaks.models import Absent
from wavepeaks.resolver import is_url

bp = Blueprint("web", __name__)

# In-memory upload store: upload_id -> upload dict
_uploads: dict[str, dict] = {}


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _media_url_error(media_url) -> str | None:
    if not isinstance(media_url, str) or not media_url:
        return "media_url is required"
    if not current_app.config["ALLOW_LOCAL_MEDIA"] and not is_url(media_url):
        return "media_url must be an http(s) URL; upload local files instead"
    return None


def _samples_arg(raw) -> int | None:
    """Parse an optional samples value, falling back to the configured default.

    Returns None when the value is not a positive integer.
    """
    if raw is None:
        return current_app.config["WAVEFORM"].samples
    if isinstance(raw, bool):
        return None
    try:
        samples = int(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    return samples if samples >= 1 else None


def _waveform_response(media_ref: str, samples: int):
    config = current_app.config["WAVEFORM"]
    outcome = compute_waveform_blocking(media_ref, samples=samples, config=config)
    if isinstance(outcome, Absent):
        return jsonify({"error": "No audio could be probed", "reason": outcome.reason}), 422
    return jsonify(outcome.metadata.to_dict())


@bp.route("/api/waveform", methods=["POST"])
def waveform():
    body = _json_body()
    media_url = body.get("media_url")
    error = _media_url_error(media_url)
    if error:
        return jsonify({"error": error}), 400

    samples = _samples_arg(body.get("samples"))
    if samples is None:
        return jsonify({"error": "samples must be a positive integer"}), 400

    return _waveform_response(media_url, samples)


@bp.route("/api/upload", methods=["POST"])
def upload():
    if "file" not in request.files:
        return jsonify({"error": "No file provided"}), 400

    f = request.files["file"]
    if not f.filename:
        return jsonify({"error": "Empty filename"}), 400

    upload_id = uuid.uuid4().hex[:12]
    upload_dir = Path(current_app.config["WORK_DIR"]) / upload_id
    upload_dir.mkdir(parents=True, exist_ok=True)

    ext = Path(f.filename).suffix or ".bin"
    input_path = upload_dir / f"input{ext}"
    f.save(input_path)

    _uploads[upload_id] = {"input_path": input_path, "filename": f.filename}

    return jsonify({"upload_id": upload_id, "filename": f.filename})


@bp.route("/api/uploads/<upload_id>/waveform")
def upload_waveform(upload_id: str):
    if upload_id not in _uploads:
        return jsonify({"error": "Upload not found"}), 404

    samples = _samples_arg(request.args.get("samples"))
    if samples is None:
        return jsonify({"error": "samples must be a positive integer"}), 400

    input_path = _uploads[upload_id]["input_path"]
    return _waveform_response(str(input_path.resolve()), samples)


@bp.route("/api/metadata/waveform", methods=["POST"])
def metadata_waveform():
    body = _json_body()
    media_url = body.get("media_url")
    error = _media_url_error(media_url)
    if error:
        return jsonify({"error": error}), 400

    samples = _samples_arg(body.get("samples"))
    if samples is None:
        return jsonify({"error": "samples must be a positive integer"}), 400

    metadata = attach_waveform(
        body.get("metadata"),
        media_url,
        samples=samples,
        config=current_app.config["WAVEFORM"],
    )
    return jsonify({"metadata": metadata})
