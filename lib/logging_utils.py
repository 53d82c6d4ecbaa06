"""Logging for hardening runs.

Every run writes a timestamped record of the commands and their outcomes to
/var/log/server_prep/, so the operator can review what changed after the
terminal session is gone.

Key Features:
- Rotating file handler with configurable size and backup count
- Plain console handler for the interactive session
- Automatic fallback to stderr if file logging fails
- Concise summaries of failed commands (first stderr lines only)
"""

from __future__ import annotations

from logging import (
    Logger, Formatter, StreamHandler, getLogger, INFO, WARNING
)
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional
import sys
import subprocess

BYTES_PER_MB = 1024 * 1024

DEFAULT_LOG_MAX_BYTES = 5 * BYTES_PER_MB
DEFAULT_LOG_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = INFO
DEFAULT_LOG_DIR = "/var/log/server_prep"

# Format: timestamp - severity - logger - message
STANDARD_LOG_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s"
STANDARD_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _ensure_fallback_handler(logger: Logger, level: int = INFO) -> None:
    """Add a stderr handler as fallback if no handlers are configured."""
    if logger.handlers:
        return

    handler = StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(get_standard_formatter())
    logger.addHandler(handler)


def get_standard_formatter() -> Formatter:
    return Formatter(STANDARD_LOG_FORMAT, STANDARD_DATE_FORMAT)


def get_rotating_logger(
    name: str,
    log_file: str,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
    level: int = DEFAULT_LOG_LEVEL
) -> Logger:
    """Return a logger configured with a rotating file handler.

    Args:
        name: Logger name
        log_file: Path to log file
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        level: Logging level

    Returns:
        Configured Logger instance with rotating file handler
    """
    logger = getLogger(name)
    if not logger.handlers:
        logger.setLevel(level)
        logger.propagate = False

    log_path = Path(log_file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except (OSError, IOError) as e:
        print(f"Error creating log directory {log_path.parent}: {e}", file=sys.stderr)
        _ensure_fallback_handler(logger, level)
        return logger

    log_file_path = str(log_path.resolve())
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == log_file_path:
            return logger

    try:
        handler = RotatingFileHandler(log_file_path, maxBytes=max_bytes, backupCount=backup_count)
        handler.setLevel(level)
        handler.setFormatter(get_standard_formatter())
        logger.addHandler(handler)
    except (OSError, IOError) as e:
        print(f"Error opening log file {log_file_path}: {e}", file=sys.stderr)
        _ensure_fallback_handler(logger, level)
        return logger

    return logger


def get_service_logger(
    service_name: str,
    log_dir: Optional[str] = None,
    level: int = DEFAULT_LOG_LEVEL,
    console_level: int = WARNING,
    console_output: bool = True
) -> Logger:
    """Get the logger for a tool run.

    The file handler records everything at ``level``. The console handler only
    shows ``console_level`` and above, since step progress is already printed.

    Example:
        logger = get_service_logger('server_setup')
        logger.info('Starting hardening run')
    """
    log_file = Path(log_dir or DEFAULT_LOG_DIR) / f"{service_name}.log"

    logger = get_rotating_logger(service_name, str(log_file), level=level)
    logger.setLevel(min(level, console_level))

    if console_output:
        has_console = False
        for h in logger.handlers:
            if isinstance(h, StreamHandler) and getattr(h, 'stream', None) is sys.stdout:
                has_console = True
                break
        if not has_console:
            console_handler = StreamHandler(sys.stdout)
            console_handler.setLevel(console_level)
            console_handler.setFormatter(Formatter('%(message)s'))
            logger.addHandler(console_handler)

    return logger


def log_subprocess_result(
    logger: Logger,
    action: str,
    result: subprocess.CompletedProcess[str],
    success_level: int = INFO,
    failure_level: int = WARNING
) -> bool:
    """Log concise command result details and return success state."""
    if result.returncode == 0:
        logger.log(success_level, f"✓ {action}")
        return True

    stderr_raw = result.stderr or ""
    if isinstance(stderr_raw, bytes):
        stderr_raw = stderr_raw.decode(errors="replace")
    stderr = stderr_raw.strip().splitlines()
    if stderr:
        detail_lines = stderr[:3]
        details = " | ".join(detail_lines)
        if len(stderr) > 3:
            details += " | ..."
    else:
        details = f"exit code {result.returncode}"
    logger.log(failure_level, f"⚠ {action} failed: {details}")
    return False
