from __future__ import annotations

import logging
import sys
from pathlib import Path

from flask import Flask, send_from_directory
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.classifier import ScribbleClassifier, build_classifier
from .game.registry import RoomRegistry
from .game.settings import GameSettings
from .game.timers import Scheduler
from .game.words import WordBank
from .realtime.handlers import register_socketio_handlers
from .realtime.transport import SocketIONotifier, SocketIOScheduler
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .routes.words import bp as words_bp


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("doodleduel").setLevel(level)


def _async_mode(app: Flask) -> str:
    configured = (app.config.get("SOCKETIO_ASYNC_MODE") or "").strip()
    if configured:
        return configured
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(
    config_class=Config,
    scheduler: Scheduler | None = None,
    classifier: ScribbleClassifier | None = None,
) -> tuple[Flask, SocketIO]:
    dist_dir = Path(__file__).resolve().parents[2] / "frontend" / "dist"

    static_folder = str(dist_dir) if dist_dir.exists() else None
    static_url_path = "/" if dist_dir.exists() else None

    app = Flask(
        __name__,
        static_folder=static_folder,
        static_url_path=static_url_path,
    )
    app.config.from_object(config_class)
    _configure_logging(app)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=_async_mode(app),
    )

    if classifier is None:
        classifier = build_classifier(
            app.config.get("SCRIBBLE_CLASSIFIER_URL", ""),
            timeout_s=float(app.config.get("SCRIBBLE_CLASSIFIER_TIMEOUT_SEC", 10)),
            token=app.config.get("SCRIBBLE_CLASSIFIER_TOKEN", ""),
        )

    registry = RoomRegistry(
        notifier=SocketIONotifier(socketio),
        scheduler=scheduler or SocketIOScheduler(socketio),
        word_bank=WordBank.load(app.config["WORDS_PATH"]),
        settings=GameSettings.from_mapping(app.config),
        classifier=classifier,
    )
    app.extensions["doodleduel"] = registry

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(words_bp, url_prefix="/api")

    register_socketio_handlers(socketio, registry)

    if dist_dir.exists():
        @app.get("/")
        def index():
            return send_from_directory(dist_dir, "index.html")

        @app.get("/<path:path>")
        def static_proxy(path: str):
            file_path = dist_dir / path
            if file_path.exists() and file_path.is_file():
                return send_from_directory(dist_dir, path)
            return send_from_directory(dist_dir, "index.html")

    return app, socketio
