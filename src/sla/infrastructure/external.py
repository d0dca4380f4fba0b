"""
SLA External Integrations
==========================

Settings store adapter for the SLA business calendar:
- YAML file holding the raw calendar settings
- watchdog observer for hot reload
"""

import threading
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from config import Settings, get_settings
from core.exceptions import ConfigurationException
from shared.infrastructure.logging import get_logger
from sla.application.services import ICalendarProvider
from sla.domain import WorkCalendar, resolve_work_calendar

logger = get_logger(__name__)


class ConfigFileHandler(FileSystemEventHandler):
    """Watchdog event handler for calendar settings file changes."""

    def __init__(self, settings_manager: "CalendarSettingsManager", settings_path: Path):
        self.settings_manager = settings_manager
        self.settings_path = settings_path
        super().__init__()

    def on_modified(self, event):
        """Handle file modification event."""
        if event.is_directory:
            return
        if Path(event.src_path).resolve() == self.settings_path.resolve():
            logger.info("SLA calendar settings changed", extra={"path": str(event.src_path)})
            self.settings_manager.reload()


class CalendarSettingsManager(ICalendarProvider):
    """
    Thread-safe calendar provider backed by a YAML settings file.

    The file is a flat mapping of raw settings, e.g.::

        slaWorkStartHour: "9"
        slaTimezone: Europe/Lisbon
        slaWorkDays: "[1,2,3,4,5]"

    A missing or unreadable file yields the default calendar.
    """

    def __init__(self):
        self._calendar: Optional[WorkCalendar] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Path) -> WorkCalendar:
        """Initial settings load."""
        self._path = Path(path)
        calendar = resolve_work_calendar(self._read_settings(self._path))
        with self._lock:
            self._calendar = calendar
        return calendar

    def _read_settings(self, path: Path) -> Dict[str, Any]:
        """Read the raw settings map, empty when it cannot be read."""
        if not path.exists():
            logger.warning("SLA calendar settings file not found, using defaults", extra={"path": str(path)})
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(
                "Unreadable SLA calendar settings file, using defaults",
                extra={"path": str(path), "error": str(e)}
            )
            return {}

        if not isinstance(data, dict):
            logger.warning(
                "SLA calendar settings file is not a mapping, using defaults",
                extra={"path": str(path)}
            )
            return {}
        return {str(key): value for key, value in data.items()}

    def reload(self) -> bool:
        """Reload settings from file."""
        if self._path is None:
            return False

        calendar = resolve_work_calendar(self._read_settings(self._path))
        with self._lock:
            self._calendar = calendar
        logger.info("SLA calendar reloaded", extra={"timezone": calendar.timezone})
        return True

    def start_watching(self) -> None:
        """
        Start watching the settings file for changes.

        Skips watching if the directory cannot be watched (e.g. inotify is
        unavailable in the container).
        """
        if self._path is None:
            raise ConfigurationException("SLA calendar settings not loaded. Call load() first.")

        try:
            self._observer = Observer()
            handler = ConfigFileHandler(self, self._path)
            self._observer.schedule(
                handler,
                str(self._path.resolve().parent),
                recursive=False
            )
            self._observer.start()
            logger.info("Started watching SLA calendar settings", extra={"path": str(self._path)})
        except OSError as e:
            logger.warning(
                "File watching not available, using static calendar",
                extra={"error": str(e)}
            )
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching the settings file (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    def get_calendar(self) -> WorkCalendar:
        """Get the calendar currently in effect."""
        with self._lock:
            calendar = self._calendar
        if calendar is None:
            raise ConfigurationException("SLA calendar settings not loaded")
        return calendar


def create_calendar_provider(settings: Optional[Settings] = None) -> CalendarSettingsManager:
    """
    Build a calendar provider from application settings.

    Loads ``sla_settings_path`` and starts the file watcher when
    ``sla_watch_settings`` is enabled.
    """
    settings = settings or get_settings()
    manager = CalendarSettingsManager()
    manager.load(settings.sla_settings_path)
    if settings.sla_watch_settings:
        manager.start_watching()
    return manager
