"""Structured event logging for module test scenarios."""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
from enum import Enum
from datetime import datetime
import json
import sys


class LogLevel(str, Enum):
    """Log severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
    LogLevel.CRITICAL: 4,
}


class Logger(ABC):
    """Abstract base class for scenario event logging."""

    @abstractmethod
    def log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an event with optional data.

        Args:
            level: Log severity level
            event: Event name, e.g. "terraform.apply" or "validation.completed"
            message: Human-readable message
            data: Optional metadata dictionary
        """
        pass

    def debug(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message."""
        self.log(LogLevel.DEBUG, event, message, data)

    def info(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log info message."""
        self.log(LogLevel.INFO, event, message, data)

    def warning(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message."""
        self.log(LogLevel.WARNING, event, message, data)

    def error(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log error message."""
        self.log(LogLevel.ERROR, event, message, data)

    def critical(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log critical message."""
        self.log(LogLevel.CRITICAL, event, message, data)


class ConsoleLogger(Logger):
    """Console logger with colored, indented output per scenario step."""

    COLORS = {
        LogLevel.DEBUG: "\033[36m",
        LogLevel.INFO: "\033[32m",
        LogLevel.WARNING: "\033[33m",
        LogLevel.ERROR: "\033[31m",
        LogLevel.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    ICONS = {
        "scenario.started": "🔨",
        "scenario.completed": "✓",
        "terraform.init": "📦",
        "terraform.apply": "🚀",
        "terraform.output": "📋",
        "terraform.destroy": "🧹",
        "validation.check": "🔍",
        "validation.completed": "🔍",
        "convergence.wait": "⏳",
        "cleanup.completed": "🧹",
        "cleanup.failed": "❌",
    }

    def __init__(
        self,
        min_level: LogLevel = LogLevel.INFO,
        colored: bool = True,
        show_timestamp: bool = False,
        show_data: bool = True,
    ):
        """
        Initialize console logger.

        Args:
            min_level: Minimum log level to display
            colored: Whether to use colored output
            show_timestamp: Whether to show timestamps
            show_data: Whether to show the key fields of the data dict
        """
        self.min_level = min_level
        self.colored = colored and sys.stdout.isatty()
        self.show_timestamp = show_timestamp
        self.show_data = show_data

    def log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log an event to console."""
        if LEVEL_ORDER[level] < LEVEL_ORDER[self.min_level]:
            return

        if event == "scenario.started":
            print()
            print("─" * 70)
            name = data.get("scenario", "unknown") if data else "unknown"
            print(self._paint(f"🔨 {name}", self.BOLD))
            print("─" * 70)
            return

        parts = []
        if self.show_timestamp:
            parts.append(self._paint(datetime.now().strftime("%H:%M:%S"), self.DIM))
        parts.append(self.ICONS.get(event, "•"))
        parts.append(self._paint(message or event, self.COLORS.get(level, "")))

        if data and self.show_data:
            key_data = self._extract_key_data(data)
            if key_data:
                parts.append(self._paint(f"({key_data})", self.DIM))

        print("  " + " ".join(parts))

    def _paint(self, text: str, color: str) -> str:
        if not self.colored or not color:
            return text
        return f"{color}{text}{self.RESET}"

    def _extract_key_data(self, data: Dict[str, Any]) -> str:
        """Extract most important data for display."""
        priority = ["module", "region", "passed", "failed", "duration_seconds"]

        key_items = []
        for key in priority:
            if key in data:
                value = data[key]
                if isinstance(value, float):
                    value = f"{value:.1f}"
                key_items.append(f"{key}={value}")

        return ", ".join(key_items)


class NullLogger(Logger):
    """Logger that does nothing."""

    def log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        pass


class MemoryLogger(Logger):
    """Logger that keeps events in a list, handy for asserting event order."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    def log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        self.events.append({
            "level": level.value,
            "event": event,
            "message": message,
            "data": data or {},
        })

    def names(self) -> List[str]:
        """Event names in the order they were logged."""
        return [entry["event"] for entry in self.events]


class FileLogger(Logger):
    """Logger that writes JSON lines to a file."""

    def __init__(self, file_path: str, min_level: LogLevel = LogLevel.INFO):
        """
        Initialize file logger.

        Args:
            file_path: Path to log file
            min_level: Minimum log level to write
        """
        self.file_path = file_path
        self.min_level = min_level

    def log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log an event to file as JSON."""
        if LEVEL_ORDER[level] < LEVEL_ORDER[self.min_level]:
            return

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level.value,
            "event": event,
            "message": message,
        }

        if data:
            log_entry["data"] = data

        with open(self.file_path, 'a') as f:
            f.write(json.dumps(log_entry, default=str) + '\n')
