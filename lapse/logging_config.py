# lapse/logging_config.py
"""
Logging configuration for the LAPSE legislation explorer.

Developer Mode:
    Set environment variable: LAPSE_DEV_MODE=1
    This enables:
    - DEBUG level logging
    - Colored console output
    - Per-phase timing logs for corpus loading and joining
"""
import logging
import sys
import os
from typing import Optional


class LogColors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"

    DEBUG = "\033[36m"      # Cyan
    INFO = "\033[32m"       # Green
    WARNING = "\033[33m"    # Yellow
    ERROR = "\033[31m"      # Red
    CRITICAL = "\033[35m"   # Magenta

    PHASE = "\033[1;34m"    # Bold Blue
    SUCCESS = "\033[1;32m"  # Bold Green
    FAIL = "\033[1;31m"     # Bold Red
    TIMING = "\033[35m"     # Magenta


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors level names and phase markers.

    Colors are only emitted when stdout is a TTY.
    """

    LEVEL_COLORS = {
        logging.DEBUG: LogColors.DEBUG,
        logging.INFO: LogColors.INFO,
        logging.WARNING: LogColors.WARNING,
        logging.ERROR: LogColors.ERROR,
        logging.CRITICAL: LogColors.CRITICAL,
    }

    # marker -> color, checked in order
    MESSAGE_MARKERS = (
        (("CHECKPOINT", "FINISH", "DONE"), LogColors.TIMING),
        (("FAILED",), LogColors.FAIL),
        (("LOADED", "JOINED"), LogColors.SUCCESS),
        (("BEGIN", "PHASE"), LogColors.PHASE),
    )

    def __init__(self, *args, use_colors: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        # Work on a copy so file handlers see the plain record
        record = logging.makeLogRecord(record.__dict__)

        if record.levelno in self.LEVEL_COLORS:
            color = self.LEVEL_COLORS[record.levelno]
            record.levelname = f"{color}{record.levelname}{LogColors.RESET}"

        message = record.getMessage()
        for markers, color in self.MESSAGE_MARKERS:
            if any(marker in message for marker in markers):
                message = f"{color}{message}{LogColors.RESET}"
                break

        record.msg = message
        record.args = ()
        return super().format(record)


def is_dev_mode() -> bool:
    """
    Check if developer mode is enabled.

    Returns:
        True if LAPSE_DEV_MODE is set to 1, yes, true or on
    """
    dev_mode = os.getenv('LAPSE_DEV_MODE', '').lower()
    return dev_mode in ('1', 'yes', 'true', 'on')


def setup_logging(
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    use_colors: bool = True
) -> logging.Logger:
    """
    Configure the ``lapse`` logger hierarchy.

    Args:
        level: Logging level (default: INFO, or DEBUG in dev mode)
        log_file: Optional file path for log output
        format_string: Custom format string for log messages
        use_colors: Whether to use colored console output

    Returns:
        The configured ``lapse`` root logger
    """
    dev_mode = is_dev_mode()

    if level is None:
        level = logging.DEBUG if dev_mode else logging.INFO

    if format_string is None:
        if dev_mode:
            format_string = '[%(asctime)s] %(levelname)-8s | %(name)-28s | %(message)s'
        else:
            format_string = '[%(asctime)s] %(levelname)s - %(name)s - %(message)s'

    logger = logging.getLogger('lapse')
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if use_colors:
        console_handler.setFormatter(ColoredFormatter(format_string, datefmt='%H:%M:%S'))
    else:
        console_handler.setFormatter(logging.Formatter(format_string, datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(console_handler)

    # File output is never colored
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s - %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    if dev_mode:
        logger.info("DEVELOPER MODE ENABLED - verbose logging active")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below the ``lapse`` root.

    Args:
        name: Short module name (e.g. 'join_service')
    """
    return logging.getLogger(f'lapse.{name}')


def log_section(logger: logging.Logger, title: str, width: int = 72) -> None:
    """Log a banner line around *title*."""
    separator = "=" * width
    logger.info(separator)
    logger.info(f"  {title}")
    logger.info(separator)
