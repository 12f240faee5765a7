"""Persistent JSON settings.

Stores search caps, debounce, walker options, and the preview style.
All access is defensive: malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path

from platformdirs import user_config_dir

from .collector import DEFAULT_CHANNEL_CAPACITY, DEFAULT_WALKER_THREADS
from .highlight import DEFAULT_STYLE
from .search import DEFAULT_DEBOUNCE_SECONDS, DEFAULT_MAX_FILES_SCANNED, DEFAULT_MAX_LINES_PER_FILE
from .state import Mode

APP_NAME = "lazyfind"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

START_MODES = {
    "searching": Mode.SEARCHING,
    "browsing": Mode.BROWSING,
}


@dataclass(frozen=True)
class Settings:
    max_files_scanned: int = DEFAULT_MAX_FILES_SCANNED
    max_lines_per_file: int = DEFAULT_MAX_LINES_PER_FILE
    debounce_ms: int = int(DEFAULT_DEBOUNCE_SECONDS * 1000)
    start_mode: str = "searching"
    show_hidden: bool = False
    respect_gitignore: bool = True
    walker_threads: int = DEFAULT_WALKER_THREADS
    channel_capacity: int = DEFAULT_CHANNEL_CAPACITY
    style: str = DEFAULT_STYLE

    @property
    def initial_mode(self) -> Mode:
        return START_MODES[self.start_mode]

    def with_overrides(self, **overrides: object) -> Settings:
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _coerce_positive_int(value: object) -> int | None:
    """Booleans and non-integers are invalid; so is anything below 1."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 1 else None


def _coerce_nonnegative_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 0 else None


def _coerce_bool(value: object) -> bool | None:
    return value if isinstance(value, bool) else None


def _coerce_start_mode(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    return normalized if normalized in START_MODES else None


def _coerce_style(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


_COERCERS = {
    "max_files_scanned": _coerce_positive_int,
    "max_lines_per_file": _coerce_positive_int,
    "debounce_ms": _coerce_nonnegative_int,
    "start_mode": _coerce_start_mode,
    "show_hidden": _coerce_bool,
    "respect_gitignore": _coerce_bool,
    "walker_threads": _coerce_positive_int,
    "channel_capacity": _coerce_positive_int,
    "style": _coerce_style,
}


def load_settings(path: Path | None = None) -> Settings:
    """Build ``Settings`` from the config file, dropping invalid values."""
    data = load_config(path)
    values: dict[str, object] = {}
    for field in fields(Settings):
        if field.name not in data:
            continue
        coerced = _COERCERS[field.name](data[field.name])
        if coerced is not None:
            values[field.name] = coerced
    return Settings(**values)
