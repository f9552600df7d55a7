import os
import logging
import time
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, g
from flask_cors import CORS

from config import Config
from src.domain.catalog import CredentialManager, TrackResolver
from src.interfaces.http.routes import health_bp, search_bp
from src.observability import configure_structured_logging, metrics_blueprint, init_tracing


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: LOG-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console
      - Werkzueg/Flask loggers routed to root (no extra console spam)

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_filename = f"log-{timestamp}"
    log_path = os.path.join(log_dir, log_filename)

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # File: INFO and above
    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # Console handler optional: keep backend console quiet unless explicitly enabled
    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        # If console logging is enabled, keep it concise: warnings and above
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # Quiet Flask/Werkzeug own console handlers; let them propagate to root
    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def create_app(credential_manager=None, track_resolver=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    configure_structured_logging(app)
    init_tracing(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex
        g.request_started = time.monotonic()

    @app.after_request
    def _log_and_tag_response(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        started = getattr(g, 'request_started', None)
        elapsed_ms = (time.monotonic() - started) * 1000 if started is not None else 0.0
        logger.info(
            "%s %s %s %.1fms",
            request.method, request.path, response.status_code, elapsed_ms,
            extra={"status_code": response.status_code, "duration_ms": round(elapsed_ms, 1)},
        )
        return response

    CORS(
        app,
        origins="*",
        send_wildcard=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=app.config['CORS_MAX_AGE_SECONDS'],
    )

    # Build catalog services once per process; routes reach them via extensions
    if track_resolver is None:
        if credential_manager is None:
            credential_manager = CredentialManager(
                token_url=app.config['SPOTIFY_TOKEN_URL'],
                timeout=app.config['SPOTIFY_HTTP_TIMEOUT_SECONDS'],
                safety_margin=app.config['SPOTIFY_TOKEN_SAFETY_MARGIN_SECONDS'],
            )
        track_resolver = TrackResolver(
            credential_manager,
            search_url=app.config['SPOTIFY_SEARCH_URL'],
            limit=app.config['SPOTIFY_SEARCH_LIMIT'],
            timeout=app.config['SPOTIFY_HTTP_TIMEOUT_SECONDS'],
        )
    app.extensions['credential_manager'] = track_resolver.credentials
    app.extensions['track_resolver'] = track_resolver

    if not track_resolver.credentials.is_configured():
        logger.warning("Spotify API client ID or client secret not found in environment variables.")
        logger.warning("Please set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET for track search.")

    # --- Register Blueprints ---
    prefix = app.config['API_ROUTE_PREFIX'] or None
    app.register_blueprint(health_bp, url_prefix=prefix)
    app.register_blueprint(search_bp, url_prefix=prefix)
    app.register_blueprint(metrics_blueprint)

    return app


if __name__ == '__main__':
    # Configure logging:
    # - In debug with reloader: only in the child process to avoid duplicate files
    # - In non-debug: always configure here
    debug_mode = bool(Config.DEBUG)
    if debug_mode:
        if os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
            log_file_path = configure_logging(Config.LOG_DIR)
            logger.info("File logging initialized at %s", log_file_path)
    else:
        log_file_path = configure_logging(Config.LOG_DIR)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    app.run(host='0.0.0.0', port=Config.PORT, debug=debug_mode)
