"""Logging setup for the planning tools.

Usage:
    from src.utils.logging_config import setup_logging

    # stderr only:
    setup_logging()

    # stderr + logs/<tool_name>.log:
    setup_logging(tool_name="reachability", debug=True)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Log rotation defaults
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 3

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_LOG_DIR = _PROJECT_ROOT / "logs"


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
    fmt: str = DEFAULT_FORMAT,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
    *,
    tool_name: str | None = None,
    log_dir: str | Path | None = None,
    debug: bool = False,
) -> str | None:
    """Configure the root logger with a consistent format.

    Call this once at the start of each entry point. Subsequent calls are
    no-ops because of ``logging.basicConfig`` semantics.

    Returns the resolved log file path, or None when logging to stderr only.
    """
    if debug:
        level = logging.DEBUG

    resolved_log_file = log_file
    if tool_name and not log_file:
        target_dir = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
        target_dir.mkdir(parents=True, exist_ok=True)
        resolved_log_file = str(target_dir / f"{tool_name}.log")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if resolved_log_file:
        Path(resolved_log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                resolved_log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
        )
    logging.basicConfig(level=level, format=fmt, handlers=handlers)

    if resolved_log_file:
        logging.getLogger(__name__).info("Logging to %s", resolved_log_file)
    return resolved_log_file
