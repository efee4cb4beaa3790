import os
from datetime import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        return int(raw)
    except Exception:
        return int(default)


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default)).strip()
    try:
        return float(raw)
    except Exception:
        return float(default)


def _get_time(name: str, default: time) -> time:
    raw = os.getenv(name, default.strftime("%H:%M")).strip()
    try:
        return time.fromisoformat(raw)
    except Exception:
        return default


# Material amber 700, blue 600, green 600, purple 600, red 600, orange 600.
FALLBACK_PALETTE = [
    "#FFA000",
    "#1E88E5",
    "#43A047",
    "#8E24AA",
    "#E53935",
    "#FB8C00",
]

DURATION_CHOICES = [30, 45, 60, 90, 120]

DEFAULT_DURATION_MIN = 30


class Settings:
    API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000").strip()
    API_TIMEOUT_SECONDS = _get_float("API_TIMEOUT_SECONDS", 10.0)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    GRID_DAY_START = _get_time("GRID_DAY_START", time(8, 0))
    GRID_DAY_END = _get_time("GRID_DAY_END", time(20, 0))
    GRID_SLOT_MINUTES = _get_int("GRID_SLOT_MINUTES", 30)
    GRID_SLOT_HEIGHT = _get_float("GRID_SLOT_HEIGHT", 60.0)
    GRID_HEADER_HEIGHT = _get_float("GRID_HEADER_HEIGHT", 60.0)


settings = Settings()
