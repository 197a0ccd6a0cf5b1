import os
from pathlib import Path


_DEFAULT_WORDS_PATH = Path(__file__).resolve().parent / "data" / "words.txt"


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO (empty: pick per platform)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Words
    WORDS_PATH = os.environ.get("WORDS_PATH", str(_DEFAULT_WORDS_PATH))
    WORD_CHOICES_COUNT = int(os.environ.get("WORD_CHOICES_COUNT", "3"))

    # Game
    ROUND_DURATION_SEC = int(os.environ.get("ROUND_DURATION_SEC", "90"))
    CHOOSE_DURATION_SEC = int(os.environ.get("CHOOSE_DURATION_SEC", "15"))
    REVEAL_DURATION_SEC = int(os.environ.get("REVEAL_DURATION_SEC", "5"))
    HINT_INTERVAL_SEC = int(os.environ.get("HINT_INTERVAL_SEC", "10"))
    EMPTY_ROOM_GRACE_SEC = int(os.environ.get("EMPTY_ROOM_GRACE_SEC", "300"))
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "2"))
    DEFAULT_TOTAL_ROUNDS = int(os.environ.get("DEFAULT_TOTAL_ROUNDS", "3"))
    MAX_TOTAL_ROUNDS = int(os.environ.get("MAX_TOTAL_ROUNDS", "10"))
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "6"))

    # Scoring
    GUESSER_RATE = float(os.environ.get("GUESSER_RATE", "0.6"))
    GUESSER_BONUS = int(os.environ.get("GUESSER_BONUS", "10"))
    GUESSER_FLOOR = int(os.environ.get("GUESSER_FLOOR", "10"))
    DRAWER_POINTS = int(os.environ.get("DRAWER_POINTS", "20"))

    # Scribble classifier (empty URL disables the feature)
    SCRIBBLE_CLASSIFIER_URL = os.environ.get("SCRIBBLE_CLASSIFIER_URL", "")
    SCRIBBLE_CLASSIFIER_TOKEN = os.environ.get("SCRIBBLE_CLASSIFIER_TOKEN", "")
    SCRIBBLE_CLASSIFIER_TIMEOUT_SEC = float(os.environ.get("SCRIBBLE_CLASSIFIER_TIMEOUT_SEC", "10"))
