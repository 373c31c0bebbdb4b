"""Runtime configuration loaded from the environment.

Settings are read from CARESHIFT_* environment variables, after loading
a .env file when one is present.
"""

import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Configuration for the scheduling core and CLI.

    Attributes:
        leave_display_start: Time of day a leave day is drawn from.
        leave_display_end: Time of day a leave day is drawn until.
        window_page_size: Days per page for constrained calendar displays.
        week_starts_on: Weekday the calendar week starts on (0 = Monday).
        strict_recurrence: Reject unknown recurrence kinds instead of
            falling back to daily.
        log_level: Logging level name for the CLI.
        snapshot_path: Default JSON snapshot the CLI reads.
    """

    leave_display_start: time = time(9, 0)
    leave_display_end: time = time(17, 0)
    window_page_size: int = 3
    week_starts_on: int = 0
    strict_recurrence: bool = False
    log_level: str = "WARNING"
    snapshot_path: Optional[Path] = None


def load_env(dotenv_path: Union[str, Path, None] = None) -> None:
    """Load variables from a .env file into the process environment."""
    path = Path(dotenv_path) if dotenv_path else None
    if path and path.exists():
        load_dotenv(path)
        return
    load_dotenv()


def _parse_time(value: str, name: str) -> time:
    try:
        hours, minutes = value.strip().split(":")[:2]
        return time(int(hours), int(minutes))
    except ValueError:
        raise ValueError(f"{name} must be HH:MM, got {value!r}")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_int(value: str, name: str, minimum: int, maximum: int) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if not minimum <= number <= maximum:
        raise ValueError(f"{name} must be between {minimum} and {maximum}")
    return number


def settings_from_env(environ: Optional[dict] = None) -> Settings:
    """Build Settings from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Raises:
        ValueError: If a variable is set to an invalid value.
    """
    env = os.environ if environ is None else environ
    defaults = Settings()

    start = env.get("CARESHIFT_LEAVE_DISPLAY_START")
    end = env.get("CARESHIFT_LEAVE_DISPLAY_END")
    page_size = env.get("CARESHIFT_WINDOW_PAGE_SIZE")
    week_start = env.get("CARESHIFT_WEEK_STARTS_ON")
    strict = env.get("CARESHIFT_STRICT_RECURRENCE")
    snapshot = env.get("CARESHIFT_SNAPSHOT")

    settings = Settings(
        leave_display_start=(
            _parse_time(start, "CARESHIFT_LEAVE_DISPLAY_START")
            if start else defaults.leave_display_start
        ),
        leave_display_end=(
            _parse_time(end, "CARESHIFT_LEAVE_DISPLAY_END")
            if end else defaults.leave_display_end
        ),
        window_page_size=(
            _parse_int(page_size, "CARESHIFT_WINDOW_PAGE_SIZE", 1, 31)
            if page_size else defaults.window_page_size
        ),
        week_starts_on=(
            _parse_int(week_start, "CARESHIFT_WEEK_STARTS_ON", 0, 6)
            if week_start else defaults.week_starts_on
        ),
        strict_recurrence=_parse_bool(strict) if strict else defaults.strict_recurrence,
        log_level=env.get("CARESHIFT_LOG_LEVEL", defaults.log_level).upper(),
        snapshot_path=Path(snapshot).expanduser() if snapshot else None,
    )

    if settings.leave_display_end < settings.leave_display_start:
        raise ValueError("CARESHIFT_LEAVE_DISPLAY_END is before CARESHIFT_LEAVE_DISPLAY_START")

    return settings


def get_settings(dotenv_path: Union[str, Path, None] = None) -> Settings:
    """Load the .env file and return Settings for this process."""
    load_env(dotenv_path)
    return settings_from_env()
