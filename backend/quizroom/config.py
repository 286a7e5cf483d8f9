import os
from pathlib import Path


class Config:
    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Built frontend, served only when the directory exists
    STATIC_DIR = os.environ.get(
        "STATIC_DIR", str(Path(__file__).resolve().parents[2] / "frontend" / "dist")
    )

    # Storage (empty STORAGE_DIR keeps snapshots in memory)
    STORAGE_DIR = os.environ.get("STORAGE_DIR", "")

    # Game
    DEFAULT_MODE = os.environ.get("DEFAULT_MODE", "serious")
    DEFAULT_ROOM_CODE = os.environ.get("DEFAULT_ROOM_CODE", "demo")
