"""Tests for configuration loading and logging setup."""

import logging
from pathlib import Path

import pytest

from calendar_core import MAX_EVENT_DURATION_MINUTES, Calendar, CalendarConfig, setup_logger


def write_config(tmp_path, text: str) -> Path:
    path = tmp_path / "calendar-core.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    config = CalendarConfig()
    assert config.max_event_duration_minutes == MAX_EVENT_DURATION_MINUTES == 24 * 60
    assert config.timezone == "UTC"
    assert config.log_level_number == logging.INFO
    assert config.storage_dir is None


def test_load(tmp_path):
    path = write_config(tmp_path, """
[General]
timezone = "Europe/Amsterdam"
max_event_duration_minutes = 480
log_level = "debug"

[Storage]
storage_dir = "~/calendars"
""")
    config = CalendarConfig.load(path)

    assert config.timezone == "Europe/Amsterdam"
    assert config.max_event_duration_minutes == 480
    assert config.log_level_number == logging.DEBUG
    assert config.storage_dir == Path.home() / "calendars"


def test_load_empty_file_uses_defaults(tmp_path):
    assert CalendarConfig.load(write_config(tmp_path, "")) == CalendarConfig()


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CalendarConfig.load(tmp_path / "missing.toml")


def test_load_malformed_toml(tmp_path):
    with pytest.raises(ValueError):
        CalendarConfig.load(write_config(tmp_path, "[General\ntimezone = "))


@pytest.mark.parametrize("kwargs", [
    {"max_event_duration_minutes": 0},
    {"max_event_duration_minutes": -5},
    {"timezone": "Mars/Olympus_Mons"},
    {"log_level": "chatty"},
])
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        CalendarConfig(**kwargs)


def test_default_config_path_follows_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert CalendarConfig.get_default_config_path() == tmp_path / "calendar-core" / "calendar-core.toml"

    config_dir = tmp_path / "calendar-core"
    config_dir.mkdir()
    write_config(config_dir, '[General]\ntimezone = "Asia/Tokyo"\n')
    assert CalendarConfig.load().timezone == "Asia/Tokyo"


def test_setup_logger_adds_one_handler():
    name = "calendar_core.tests.setup"
    logger = setup_logger(logging.WARNING, name=name)
    try:
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

        setup_logger(logging.DEBUG, name=name)
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.DEBUG
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)


def test_from_config_applies_log_level(tmp_path, restore_package_logger):
    path = write_config(tmp_path, f"""
[General]
log_level = "WARNING"

[Storage]
storage_dir = "{(tmp_path / 'store').as_posix()}"
""")
    Calendar.from_config(CalendarConfig.load(path))

    assert restore_package_logger.level == logging.WARNING
    assert restore_package_logger.getEffectiveLevel() == logging.WARNING
    assert not restore_package_logger.isEnabledFor(logging.INFO)
