# adapters/web/api_blueprint.py
# REST API Blueprint: remote download relay and media trimming.

import os
import logging
from functools import wraps

from flask import Blueprint, Response, current_app, jsonify, request, stream_with_context

from application.dto.trim_dto import FetchOptions
from application.ports.media_fetcher_port import FetchError
from application.ports.transcoder_port import TranscodeError
from trimmer.core import trim_media, validate_trim_params

logger = logging.getLogger("media_trimmer")

api = Blueprint('api', __name__, url_prefix='/api')


# Simple API Key auth
def require_api_key(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        # Look for API_KEY env var; if not set, API is open (for local dev)
        expected_key = os.environ.get("API_KEY")
        if expected_key:
            auth_header = request.headers.get("Authorization")
            if not auth_header or not auth_header.startswith("Bearer "):
                return jsonify({"error": "Unauthorized. Missing Bearer token."}), 401
            token = auth_header.split(" ", 1)[1]
            if token != expected_key:
                return jsonify({"error": "Unauthorized. Invalid API key."}), 403
        return f(*args, **kwargs)
    return decorated


def _is_truthy(value) -> bool:
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


@api.route('/download', methods=['GET'])
@require_api_key
def download():
    """
    GET /api/download?url=<url>[&audioOnly=true]
    Streams the downloader's stdout as the response body.
    """
    url = request.args.get("url", "").strip()
    if not url:
        return jsonify({"error": "Missing url"}), 400

    options = FetchOptions(audio_only=_is_truthy(request.args.get("audioOnly")))
    fetcher = current_app.config["MEDIA_FETCHER"]

    try:
        stream = fetcher.fetch_stream(url, options)
    except FetchError as e:
        logger.error("Download error url=%s: %s", url, e)
        return jsonify({"error": "Download failed"}), 500

    logger.info("download started ip=%s audio_only=%s", request.remote_addr, options.audio_only)
    response = Response(
        stream_with_context(stream.chunks),
        status=200,
        mimetype=stream.mimetype,
    )
    # The body may never be iterated (HEAD, early disconnect); stop the child on close
    response.call_on_close(stream.close)
    return response


@api.route('/trim-video', methods=['POST'])
@require_api_key
def trim_video():
    """
    POST /api/trim-video
    Form fields:
      - media     : audio/video file (multipart)
      - startTime : HH:MM:SS
      - duration  : seconds
      - mediaType : "video" | "audio"
    Returns: trimmed bytes as an attachment named trimmed.<ext>
    """
    media_file = request.files.get("media")
    if media_file is None:
        return jsonify({"error": "No media file provided"}), 400

    start_time = request.form.get("startTime", "")
    duration = request.form.get("duration", "")
    media_type = request.form.get("mediaType", "")

    # These strings end up as transcoder arguments
    try:
        validate_trim_params(start_time, duration)
    except ValueError as e:
        logger.warning("trim rejected ip=%s reason=%s", request.remote_addr, str(e).splitlines()[0])
        return jsonify({"error": str(e).splitlines()[0]}), 400

    try:
        result = trim_media(
            source=media_file,
            start_time=start_time,
            duration=duration,
            media_kind=media_type,
            transcoder=current_app.config["TRANSCODER"],
            scratch_dir=current_app.config["SCRATCH_DIR"],
        )
    except (TranscodeError, OSError) as e:
        logger.error("Error trimming media: %s", e, exc_info=True)
        return jsonify({"error": "Failed to trim media"}), 500
    except Exception as e:
        logger.error("Unexpected error trimming media: %s", e, exc_info=True)
        return jsonify({"error": "Failed to trim media"}), 500

    logger.info(
        "trim done ip=%s kind=%s start=%s duration=%s size=%dB time=%.1fs",
        request.remote_addr, media_type or "audio", start_time, duration,
        len(result.data), result.elapsed,
    )

    response = Response(result.data, status=200, mimetype=result.mimetype)
    response.headers["Content-Disposition"] = f'attachment; filename="{result.filename}"'
    return response
