"""
Logging service for bbox-overlay.
Wraps the standard logging module behind ILogger so services can be
handed a console/file logger in the app and an in-memory one in tests.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List
from pathlib import Path
import logging
import sys
from datetime import datetime
from enum import Enum

from .interfaces import ILogger


class LogLevel(Enum):
    """Log level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LoggingService(ILogger):
    """ILogger backed by a named stdlib logger."""

    def __init__(self, name: str = "bbox_overlay", log_file: Optional[Path] = None,
                 console_level: LogLevel = LogLevel.WARNING, file_level: LogLevel = LogLevel.DEBUG):
        self._name = name
        self._log_file = log_file
        self._console_level = console_level
        self._file_level = file_level

        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        # Re-creating the service must not stack handlers
        self._logger.handlers.clear()

        self._setup_console_handler()
        if log_file:
            self._setup_file_handler()

    def _setup_console_handler(self) -> None:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, self._console_level.value))
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        ))
        self._logger.addHandler(console_handler)

    def _setup_file_handler(self) -> None:
        try:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self._log_file, encoding='utf-8')
        except OSError as e:
            print(f"Failed to set up file logging: {e}", file=sys.stderr)
            return

        file_handler.setLevel(getattr(logging, self._file_level.value))
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        self._logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(f"{message}{self._format_extra_info(kwargs)}")

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(f"{message}{self._format_extra_info(kwargs)}")

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(f"{message}{self._format_extra_info(kwargs)}")

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs) -> None:
        full_message = f"{message}{self._format_extra_info(kwargs)}"
        if exception:
            self._logger.error(full_message, exc_info=exception)
        else:
            self._logger.error(full_message)

    def _format_extra_info(self, kwargs: Dict[str, Any]) -> str:
        """Render keyword arguments as ' [k=v, ...]'."""
        if not kwargs:
            return ""
        parts = [f"{key}={value}" for key, value in kwargs.items()]
        return f" [{', '.join(parts)}]"


class NullLogger(ILogger):
    """Logger that discards everything."""

    def debug(self, message: str, **kwargs) -> None:
        pass

    def info(self, message: str, **kwargs) -> None:
        pass

    def warning(self, message: str, **kwargs) -> None:
        pass

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs) -> None:
        pass


class MemoryLogger(ILogger):
    """In-memory logger for testing purposes."""

    def __init__(self, max_entries: int = 1000):
        self._max_entries = max_entries
        self._entries: List[Dict[str, Any]] = []

    def debug(self, message: str, **kwargs) -> None:
        self._add_entry("DEBUG", message, kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._add_entry("INFO", message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._add_entry("WARNING", message, kwargs)

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs) -> None:
        entry_kwargs = dict(kwargs)
        if exception:
            entry_kwargs['exception'] = str(exception)
        self._add_entry("ERROR", message, entry_kwargs)

    def _add_entry(self, level: str, message: str, kwargs: Dict[str, Any]) -> None:
        self._entries.append({
            'timestamp': datetime.now(),
            'level': level,
            'message': message,
            'kwargs': kwargs
        })
        if len(self._entries) > self._max_entries:
            self._entries = self._entries[-self._max_entries:]

    def get_entries(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        if level:
            return [e for e in self._entries if e['level'] == level]
        return self._entries.copy()

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [e['message'] for e in self.get_entries(level)]

    def clear(self) -> None:
        self._entries.clear()
