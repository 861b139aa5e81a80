"""Logging setup for the CLI and library callers."""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO

DEFAULT_LOG_DIR = Path(".knot/logs")


class KnotFormatter(logging.Formatter):
    """Compact formatter: time, level, short logger name, message."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = True, stream: Optional[TextIO] = None):
        """Initialize formatter.

        Args:
            use_colors: Whether to color the level name
            stream: Stream whose TTY status gates colors (stderr by default)
        """
        super().__init__()
        self.use_colors = use_colors
        self.stream = stream

    def _colors_enabled(self) -> bool:
        stream = self.stream if self.stream is not None else sys.stderr
        return self.use_colors and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        if self._colors_enabled():
            level = f"{self.COLORS.get(level, '')}{level}{self.COLORS['RESET']}"

        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        name = record.name.rsplit(".", 1)[-1]
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"[{timestamp}] {level:8} {name:12} {message}"


def _resolve_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def _prune_logs(log_dir: Path, retention_days: int) -> int:
    """Delete log files older than ``retention_days``; returns how many went."""
    if retention_days <= 0:
        return 0
    cutoff = datetime.now().timestamp() - retention_days * 86400
    removed = 0
    for path in log_dir.glob("*.log*"):
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
                removed += 1
        except OSError:
            continue
    return removed


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    log_dir: Optional[Path] = None,
    rotation_mb: int = 10,
    retention_days: int = 7,
    use_colors: bool = True,
    console: bool = True,
) -> None:
    """Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        log_dir: Directory for a timestamped log file when log_file is not given
        rotation_mb: Max log size before rotation (MB)
        retention_days: Days to keep old log files (<=0 keeps everything)
        use_colors: Whether to color console output
        console: Whether to log to stderr

    Raises:
        ValueError: If the level name is unknown
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(_resolve_level(level))
    root_logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(KnotFormatter(use_colors=use_colors))
        root_logger.addHandler(console_handler)

    if log_file is None and log_dir is not None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(log_dir) / f"knot_{timestamp}.log"

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _prune_logs(log_file.parent, retention_days)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max(1, rotation_mb) * 1024 * 1024,
            backupCount=max(1, retention_days),
        )
        file_handler.setFormatter(KnotFormatter(use_colors=False))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
