"""
Logging for the auction operator.

Every module logs through a child of the `auction_operator` logger. The
console gets colored lines; LOG_TO_FILE adds a plain copy in LOG_DIR.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import colorlog

ROOT_LOGGER = "auction_operator"
LOG_FILE = "operator.log"

LINE_FORMAT = "%(asctime)s [%(name)s] %(levelname)-8s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

_configured = False


def _console_handler(level: int) -> logging.Handler:
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s" + LINE_FORMAT.replace("%(message)s", "%(reset)s%(message)s"),
            datefmt=DATE_FORMAT,
            log_colors=LEVEL_COLORS,
        )
    )
    return handler


def _file_handler(log_dir: Path, level: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / LOG_FILE, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LINE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    log_to_file: bool = False,
) -> logging.Logger:
    """
    (Re)configure the operator's handlers.

    Replaces any handlers from an earlier call, so the CLI can switch level
    after the config is loaded.

    Args:
        level: Threshold for the logger and its handlers
        log_dir: Directory for operator.log (default ./logs)
        log_to_file: Also write plain lines to LOG_DIR/operator.log

    Returns:
        The package root logger
    """
    global _configured

    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(level)
    root.addHandler(_console_handler(level))
    if log_to_file:
        root.addHandler(_file_handler(Path(log_dir) if log_dir else Path("logs"), level))

    _configured = True
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for one subsystem ('engine', 'scheduler', 'events', ...)."""
    if not _configured:
        setup_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
