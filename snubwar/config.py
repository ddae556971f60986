"""
Single place for runtime configuration.
Values can be overridden through environment variables (SNUBWAR_*).
"""

import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Arm-then-confirm moves: first click on a valid face arms it, a second click on the same face commits.
REQUIRE_MOVE_CONFIRMATION = _env_flag("SNUBWAR_CONFIRM_MOVES", False)

# Format tag written into exported snapshots. Imports with another version are rejected.
SNAPSHOT_VERSION = "1.0.0"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "SNUBWAR_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:8080,http://localhost:3000",
    ).split(",")
    if origin.strip()
]

try:
    API_PORT = int(os.environ.get("SNUBWAR_PORT", "8000"))
except ValueError:
    API_PORT = 8000
