"""Best-effort persistence of display preferences."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Callable, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)

DARK_MODE_KEY = "darkMode:v1"


class PreferenceStore:
    """Small JSON-file key/value store whose reads and writes never raise.

    A missing, unreadable or corrupt file reads as empty; failed writes
    return False. Callers fall back to computed defaults.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read(self, key: str) -> Optional[str]:
        data = self._load()
        if data is None:
            return None
        value = data.get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> bool:
        data = self._load() or {}
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(data), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.warning("preference_write_failed", path=str(self.path), error=str(e))
            return False
        return True

    def _load(self) -> Optional[Dict[str, object]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("preference_read_failed", path=str(self.path), error=str(e))
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("preference_file_corrupt", path=str(self.path))
            return None
        return data if isinstance(data, dict) else None


def system_prefers_dark(environ: Optional[Dict[str, str]] = None) -> bool:
    """Guess the terminal theme from ``COLORFGBG`` ("fg;bg", bg 0-6 or 8 is dark)."""
    env = os.environ if environ is None else environ
    value = env.get("COLORFGBG", "")
    background = value.rsplit(";", 1)[-1].strip()
    if not background.isdigit():
        return False
    return int(background) in (0, 1, 2, 3, 4, 5, 6, 8)


def load_dark_mode(
    store: PreferenceStore,
    default: Callable[[], bool] = system_prefers_dark,
) -> bool:
    """Stored preference, else the computed default."""
    stored = store.read(DARK_MODE_KEY)
    if stored in ("true", "false"):
        return stored == "true"
    return default()


def save_dark_mode(store: PreferenceStore, value: bool) -> bool:
    return store.write(DARK_MODE_KEY, "true" if value else "false")
