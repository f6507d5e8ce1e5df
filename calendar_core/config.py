"""
Configuration parser for calendar_core.

Handles TOML file parsing into a CalendarConfig dataclass. Every key is
optional; missing keys fall back to the defaults below.

Example:

    [General]
    timezone = "Europe/Amsterdam"
    max_event_duration_minutes = 1440
    log_level = "INFO"

    [Storage]
    storage_dir = "~/.local/share/calendar-core/storage"
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pytz


# Longest event the engine accepts unless configured otherwise: one day
MAX_EVENT_DURATION_MINUTES = 24 * 60


@dataclass
class CalendarConfig:
    """Main configuration container for calendar_core."""

    max_event_duration_minutes: int = MAX_EVENT_DURATION_MINUTES
    timezone: str = "UTC"  # Used for naive datetimes passed to the engine
    log_level: str = "INFO"  # Applied by Calendar.from_config
    storage_dir: Optional[Path] = None  # None selects the XDG data directory

    def __post_init__(self):
        if self.max_event_duration_minutes <= 0:
            raise ValueError(
                f"max_event_duration_minutes must be positive, got {self.max_event_duration_minutes}"
            )
        if self.timezone not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {self.timezone}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'calendar-core' / 'calendar-core.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'CalendarConfig':
        """
        Load configuration from a TOML file.

        Raises:
            FileNotFoundError: if the file does not exist.
            ValueError: if a value is out of range or the TOML is malformed.
        """
        if config_path is None:
            config_path = cls.get_default_config_path()
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        # Parse General section
        general = data.get('General', {})

        # Parse Storage section
        storage = data.get('Storage', {})
        storage_dir = None
        if storage.get('storage_dir'):
            storage_dir = Path(os.path.expanduser(storage['storage_dir']))

        return cls(
            max_event_duration_minutes=general.get('max_event_duration_minutes', MAX_EVENT_DURATION_MINUTES),
            timezone=general.get('timezone', cls.timezone),
            log_level=general.get('log_level', cls.log_level),
            storage_dir=storage_dir,
        )
