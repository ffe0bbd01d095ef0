import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, jsonify, g
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Config, MULTIPART_SLACK_BYTES
from tunebox.database.db_manager import initialize_database
from tunebox.domain.library import (
    BlobStore,
    LibraryError,
    LibraryService,
    MutagenMetadataExtractor,
    PlaylistRepository,
    SongRepository,
    UploadPolicy,
)
from tunebox.interfaces.http.routes import (
    playlist_bp,
    song_bp,
    admin_bp,
    media_bp,
    health_bp,
)
from tunebox.observability import configure_structured_logging, metrics_blueprint


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set
      - Werkzeug/Flask loggers routed to root (no extra console spam)

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


def register_error_handlers(app: Flask) -> None:
    """Render every failure as ``{"error": message}``."""

    @app.errorhandler(LibraryError)
    def _library_error(exc: LibraryError):
        if exc.status_code >= 500:
            app.logger.error("Request failed: %s", exc)
        return jsonify({'error': str(exc)}), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return jsonify({'error': exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def _unhandled_error(exc: Exception):
        app.logger.error("Unhandled error on %s %s", request.method, request.path, exc_info=exc)
        return jsonify({'error': str(exc) or exc.__class__.__name__}), 500


def build_library_service(app: Flask) -> LibraryService:
    blob_store = BlobStore(base_dir=app.config['UPLOAD_DIR'])
    policy = UploadPolicy(
        allowed_extensions=app.config.get('ALLOWED_AUDIO_EXTENSIONS'),
        max_bytes=app.config['MAX_UPLOAD_BYTES'],
    )
    return LibraryService(
        blob_store=blob_store,
        playlists=PlaylistRepository(),
        songs=SongRepository(),
        extractor=MutagenMetadataExtractor(),
        upload_policy=policy,
        require_existing_playlist=app.config['REQUIRE_EXISTING_PLAYLIST'],
    )


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
        if 'MAX_UPLOAD_BYTES' in overrides and 'MAX_CONTENT_LENGTH' not in overrides:
            app.config['MAX_CONTENT_LENGTH'] = overrides['MAX_UPLOAD_BYTES'] + MULTIPART_SLACK_BYTES
    configure_structured_logging(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config['CORS_ALLOWED_ORIGINS']
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(app, resources={r"/api/*": {"origins": allowed_origins}})

    # Initialize database
    initialize_database(app)

    # Build the library service with explicit collaborators; routes reach it through app.extensions
    library_service = build_library_service(app)
    app.extensions['library_service'] = library_service
    app.extensions['blob_store'] = library_service.blob_store
    app.logger.info(
        "Library service ready: uploads=%s, max_bytes=%s, require_existing_playlist=%s",
        library_service.blob_store.base_dir,
        library_service.upload_policy.max_bytes,
        library_service.require_existing_playlist,
    )

    register_error_handlers(app)

    # --- Register Blueprints ---
    app.register_blueprint(playlist_bp)
    app.register_blueprint(song_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(media_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)

    return app


if __name__ == '__main__':
    os.makedirs(Config.UPLOAD_DIR, exist_ok=True)

    # Configure logging:
    # - In debug with reloader: only in the child process to avoid duplicate files
    # - In non-debug: always configure here
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'log')
    if not Config.DEBUG or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application on port %s", Config.PORT)
    app.run(debug=Config.DEBUG, host='0.0.0.0', port=Config.PORT, threaded=True)
