from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask, jsonify, request, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .errors import QuizRoomError
from .game.registry import RoomRegistry
from .game.storage import build_store
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp


logger = logging.getLogger(__name__)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(QuizRoomError)
    def handle_room_error(exc: QuizRoomError):
        if exc.status_code >= 500:
            logger.error(f"[error] path={request.path} {type(exc).__name__}: {exc.message}")
            return jsonify({"ok": False, "error": "Internal server error"}), exc.status_code
        return jsonify({"ok": False, "error": exc.message}), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        if not request.path.startswith("/api/"):
            return exc
        if exc.code == 404:
            return jsonify({"ok": False, "error": "Route not found"}), 404
        return jsonify({"ok": False, "error": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception(f"[error] path={request.path} unhandled {type(exc).__name__}")
        return jsonify({"ok": False, "error": "Internal server error"}), 500


def create_app(config_class=Config) -> Flask:
    static_dir = getattr(config_class, "STATIC_DIR", "") or ""
    dist_dir = Path(static_dir).resolve()
    serve_static = bool(static_dir) and dist_dir.is_dir()

    # The built frontend is served by the explicit routes below only, so
    # unknown paths fall through to index.html.
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    store = app.config.get("ROOM_STORE") or build_store(app.config.get("STORAGE_DIR"))
    app.extensions["quizroom"] = RoomRegistry(store, default_mode=app.config.get("DEFAULT_MODE", "serious"))
    logger.info(
        f"[startup] store={type(store).__name__} default_mode={app.extensions['quizroom'].default_mode}"
    )

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")

    _register_error_handlers(app)

    if serve_static:
        @app.get("/")
        def index():
            return send_from_directory(dist_dir, "index.html")

        @app.get("/<path:path>")
        def static_proxy(path: str):
            if path.startswith("api/"):
                return jsonify({"ok": False, "error": "Route not found"}), 404
            file_path = dist_dir / path
            if file_path.exists() and file_path.is_file():
                return send_from_directory(dist_dir, path)
            return send_from_directory(dist_dir, "index.html")

    return app
