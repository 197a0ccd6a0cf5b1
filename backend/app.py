import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


logger = logging.getLogger("doodleduel")


def _wants_eventlet() -> bool:
    mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if mode:
        return mode == "eventlet"
    return not sys.platform.startswith("win") and sys.version_info < (3, 13)


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    # Must patch before flask/socketio import sockets and threading.
    if _wants_eventlet():
        import eventlet

        eventlet.monkey_patch()

    from doodleduel.server import create_app

    app, socketio = create_app()

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "9002"))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    registry = app.extensions["doodleduel"]
    logger.info(
        "doodleduel listening on %s:%d (async_mode=%s, %d words)",
        host,
        port,
        socketio.async_mode,
        len(registry.word_bank),
    )

    socketio.run(
        app,
        host=host,
        port=port,
        debug=debug,
        allow_unsafe_werkzeug=os.environ.get("ALLOW_UNSAFE_WERKZEUG", "1") == "1",
        use_reloader=os.environ.get("FLASK_USE_RELOADER", "0") == "1",
    )


if __name__ == "__main__":
    main()
