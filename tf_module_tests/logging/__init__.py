"""Logging module for tf-module-tests."""

from .logger import (
    Logger,
    LogLevel,
    ConsoleLogger,
    NullLogger,
    MemoryLogger,
    FileLogger,
)

__all__ = [
    "Logger",
    "LogLevel",
    "ConsoleLogger",
    "NullLogger",
    "MemoryLogger",
    "FileLogger",
]
