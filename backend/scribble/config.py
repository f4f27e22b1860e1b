import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Empty means pick per platform (see server._pick_async_mode)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "")

    # Game
    TURN_DURATION_SEC = int(os.environ.get("TURN_DURATION_SEC", "80"))
    MAX_ROUNDS = int(os.environ.get("MAX_ROUNDS", "3"))
    MAX_PLAYERS = int(os.environ.get("MAX_PLAYERS", "8"))
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "2"))
    GUESS_GRACE_SEC = float(os.environ.get("GUESS_GRACE_SEC", "2"))
    CHAT_SNAPSHOT_LIMIT = int(os.environ.get("CHAT_SNAPSHOT_LIMIT", "50"))

    # Room codes
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "6"))
    ROOM_CODE_ATTEMPTS = int(os.environ.get("ROOM_CODE_ATTEMPTS", "10"))

    # Send the secret word only to the drawer (length-only to everyone else)
    REDACT_WORD = os.environ.get("REDACT_WORD", "1") == "1"
