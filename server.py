# server.py
import os
import logging

from flask import Flask, request, jsonify, render_template
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from infrastructure.media.ffmpeg_transcoder import FFmpegTranscoder
from infrastructure.media.ytdlp_fetcher import YtDlpFetcher
from trimmer.utils import SCRATCH_DIR, MAX_UPLOAD_MB, HLS_DEMO_SOURCES

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("media_trimmer")

# ── Flask app ────────────────────────────────────────────────────────
app = Flask(__name__, static_folder="web", static_url_path="/static", template_folder="web")

# Upload size limit
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_MB * 1024 * 1024

# Restrict CORS to own origin
CORS(app, resources={
    r"/api/*": {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
})

# Load secret key from env or generate random
app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET_KEY") or os.urandom(32)

# External tools behind ports; tests swap these for fakes
app.config["TRANSCODER"] = FFmpegTranscoder()
app.config["MEDIA_FETCHER"] = YtDlpFetcher()
app.config["SCRATCH_DIR"] = SCRATCH_DIR

# ── API Blueprint Registration ─────────────────────────────────────────
from adapters.web.api_blueprint import api
app.register_blueprint(api)

import adapters.web.openapi_spec as openapi_spec
@app.route("/api/openapi.json")
def get_openapi_spec():
    return jsonify(openapi_spec.OPENAPI_SPEC)


# ════════════════════════════════════════════════════════════════════
# Pages
# ════════════════════════════════════════════════════════════════════

@app.route("/")
def index():
    """Serve the trim form."""
    return app.send_static_file("index.html")


@app.route("/demo")
def demo():
    """Two HLS streams with a toggle that keeps playback position."""
    primary, secondary = HLS_DEMO_SOURCES
    return render_template(
        "demo.html",
        video1_src=primary,
        video2_src=secondary,
        width=800,
        height=450,
    )


# ════════════════════════════════════════════════════════════════════
# Error handlers & Security headers
# ════════════════════════════════════════════════════════════════════

@app.errorhandler(413)
def request_entity_too_large(e):
    return jsonify({"error": f"File too large. Maximum size is {MAX_UPLOAD_MB} MB."}), 413


@app.errorhandler(404)
def not_found(e):
    path = request.path
    # Log suspicious path patterns
    suspicious = any(p in path for p in ["..", "etc", "passwd", "wp-admin", ".env"])
    if suspicious:
        logger.warning("suspicious 404 ip=%s path=%s", request.remote_addr, path)
    return jsonify({"error": "Not found."}), 404


@app.errorhandler(Exception)
def handle_exception(e):
    """Catch-all: log the traceback, return a generic message."""
    if isinstance(e, HTTPException):
        return jsonify({"error": e.description}), e.code
    logger.error("unhandled exception: %s", e, exc_info=True)
    return jsonify({"error": "An internal error occurred."}), 500


@app.after_request
def set_security_headers(response):
    """Add security headers to every response."""
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Content-Security-Policy"] = (
        "default-src 'self'; "
        "script-src 'self' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; "
        "media-src 'self' blob: https:; "
        "connect-src 'self' https:; "
        "worker-src 'self' blob:; "
        "object-src 'none'; "
        "base-uri 'self';"
    )
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = (
        "camera=(), microphone=(), geolocation=(), payment=()"
    )
    return response


# ════════════════════════════════════════════════════════════════════
# Entry point
# ════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    debug_mode = os.environ.get("FLASK_DEBUG", "false").lower() == "true"
    app.run(debug=debug_mode, port=5000, threaded=True)
