import os
import string

# Process configuration (environment)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# One-on-one rooms only.
ROOM_CAPACITY = 2

# Room ids: 36**9 ~ 1e14 possible values.
ROOM_ID_ALPHABET = string.digits + string.ascii_lowercase
ROOM_ID_LENGTH = 9
MAX_ID_ATTEMPTS = 5

__all__ = [
    "HOST",
    "PORT",
    "LOG_LEVEL",
    "LOG_FILE",
    "CORS_ORIGINS",
    "ROOM_CAPACITY",
    "ROOM_ID_ALPHABET",
    "ROOM_ID_LENGTH",
    "MAX_ID_ATTEMPTS",
]
