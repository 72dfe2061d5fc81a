import os
import logging
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Callable, List, Optional

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///wanderlust.db")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "60"))
REMINDER_INTERVAL_SECONDS = float(os.getenv("REMINDER_INTERVAL_SECONDS", "60"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:8000",
    ).split(",")
    if origin.strip()
]


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


class ThemeMode(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"
    SEASONAL = "seasonal"


# Sep, Oct, Nov, Dec, Jan, Feb
DARK_SEASON_MONTHS = {9, 10, 11, 12, 1, 2}


def resolve_theme(mode: ThemeMode, today: Optional[date] = None, system_dark: bool = False) -> str:
    """Return the concrete appearance ("dark" or "light") for a theme mode."""
    if mode == ThemeMode.DARK:
        return "dark"
    if mode == ThemeMode.LIGHT:
        return "light"
    if mode == ThemeMode.SYSTEM:
        return "dark" if system_dark else "light"
    today = today or date.today()
    return "dark" if today.month in DARK_SEASON_MONTHS else "light"


@dataclass(frozen=True)
class Preferences:
    theme: ThemeMode = ThemeMode.SYSTEM


class PreferenceStore:
    """Holds the active Preferences and tells subscribers when they change."""

    def __init__(self, initial: Optional[Preferences] = None):
        self._current = initial or Preferences()
        self._listeners: List[Callable[[Preferences], None]] = []

    @property
    def current(self) -> Preferences:
        return self._current

    def subscribe(self, listener: Callable[[Preferences], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes) -> Preferences:
        updated = replace(self._current, **changes)
        if updated == self._current:
            return updated
        self._current = updated
        for listener in list(self._listeners):
            listener(updated)
        return updated


preferences = PreferenceStore()
