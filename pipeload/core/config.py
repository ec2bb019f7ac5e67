"""pipeload configuration management.

This module centralizes all configuration loading from environment variables
and provides sensible defaults. All modules should import configuration
values from here rather than reading environment variables directly.

Environment Variables:
    PIPELOAD_WORK_DIR: Base directory for task-attempt working directories
                       Default: .pipeload/work (relative to cwd)

    PIPELOAD_FIFO_NAME: File name of the named pipe inside an attempt directory
                        Default: export.fifo

    PIPELOAD_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
                        Default: INFO

    PIPELOAD_LOG_FORMAT: Log output format (text, json)
                         Default: text

    PIPELOAD_OPEN_POLL_INTERVAL: Seconds between attempts to open the pipe's
                                 write side while waiting for the reader
                                 Default: 0.05

    PIPELOAD_INTERRUPT_JOIN_TIMEOUT: Seconds to wait for the loader thread
                                     after the export is interrupted
                                     Default: 30

    PIPELOAD_WRITE_BUFFER_SIZE: Buffer size in bytes for the pipe's write side
                                Default: 65536
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.environ.get(key, "")
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


@dataclass
class PipeloadConfig:
    """pipeload configuration container.

    All configuration values are loaded from environment variables
    with sensible defaults.

    Usage:
        from pipeload.core.config import config

        work_dir = config.get_work_dir()
        poll = config.open_poll_interval
    """

    # Working directory / pipe configuration
    work_dir: Path = field(default_factory=lambda: Path(_get_str("PIPELOAD_WORK_DIR", ".pipeload/work")))
    fifo_name: str = field(default_factory=lambda: _get_str("PIPELOAD_FIFO_NAME", "export.fifo"))
    write_buffer_size: int = field(default_factory=lambda: _get_int("PIPELOAD_WRITE_BUFFER_SIZE", 65536))

    # Logging configuration
    log_level: str = field(default_factory=lambda: _get_str("PIPELOAD_LOG_LEVEL", "INFO").upper())
    log_format: str = field(default_factory=lambda: _get_str("PIPELOAD_LOG_FORMAT", "text"))

    # Export timing
    open_poll_interval: float = field(default_factory=lambda: _get_float("PIPELOAD_OPEN_POLL_INTERVAL", 0.05))
    interrupt_join_timeout: float = field(default_factory=lambda: _get_float("PIPELOAD_INTERRUPT_JOIN_TIMEOUT", 30.0))

    def __post_init__(self):
        """Validate configuration after initialization."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level not in valid_levels:
            raise ValueError(
                f"Invalid PIPELOAD_LOG_LEVEL: {self.log_level}. "
                f"Must be one of: {valid_levels}"
            )

        valid_formats = {"text", "json"}
        if self.log_format not in valid_formats:
            raise ValueError(
                f"Invalid PIPELOAD_LOG_FORMAT: {self.log_format}. "
                f"Must be one of: {valid_formats}"
            )

        if not self.fifo_name or "/" in self.fifo_name:
            raise ValueError(f"PIPELOAD_FIFO_NAME must be a plain file name, got {self.fifo_name!r}")

        if self.write_buffer_size < 1:
            raise ValueError(f"PIPELOAD_WRITE_BUFFER_SIZE must be >= 1, got {self.write_buffer_size}")

        if self.open_poll_interval <= 0:
            raise ValueError(f"PIPELOAD_OPEN_POLL_INTERVAL must be > 0, got {self.open_poll_interval}")

        if self.interrupt_join_timeout <= 0:
            raise ValueError(
                f"PIPELOAD_INTERRUPT_JOIN_TIMEOUT must be > 0, got {self.interrupt_join_timeout}"
            )

    def get_work_dir(self) -> Path:
        """Get the absolute base directory for task attempts.

        Returns:
            Absolute path to the work directory
        """
        path = self.work_dir
        if not path.is_absolute():
            path = Path.cwd() / path
        return path

    def as_dict(self) -> dict:
        """Export configuration as dictionary.

        Returns:
            Dictionary of all configuration values
        """
        return {
            "work_dir": str(self.work_dir),
            "fifo_name": self.fifo_name,
            "write_buffer_size": self.write_buffer_size,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "open_poll_interval": self.open_poll_interval,
            "interrupt_join_timeout": self.interrupt_join_timeout,
        }


def load_config() -> PipeloadConfig:
    """Load configuration from environment.

    Call this to refresh config if the environment has changed.

    Returns:
        New PipeloadConfig instance
    """
    return PipeloadConfig()


# Global configuration instance - loaded once at import time
# Use load_config() to refresh if needed
config = load_config()
