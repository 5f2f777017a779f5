"""
Console logging for the Message Board backend
=============================================

Coloured, single-line console output for the standard logging module.
IMPORTANT: No emojis in console output (Windows encoding issues).
"""

import logging
import sys
from typing import Iterable, Optional

from colorama import Fore, Style, init

# Initialize colorama for Windows
init(autoreset=True)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"

LEVEL_COLORS = {
    logging.DEBUG: Fore.WHITE + Style.DIM,
    logging.INFO: Fore.GREEN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}

# Silence noisy third-party loggers to avoid cluttering output
NOISY_LOGGERS = (
    "httpcore",
    "httpx",
    "multipart",
    "python_multipart",
    "uvicorn.access",
)


class ColoredFormatter(logging.Formatter):
    """Formatter that tints the level name and message by severity."""

    def __init__(self, fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT, use_color: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self.use_color:
            return text
        color = LEVEL_COLORS.get(record.levelno, "")
        return f"{color}{text}{Style.RESET_ALL}"


def setup_logging(
    level: str = "INFO",
    *,
    use_color: Optional[bool] = None,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Configure the root logger with a coloured console handler.

    Safe to call more than once: the handler installed by a previous call is
    replaced instead of duplicated.

    Args:
        level: Root level name (DEBUG, INFO, ...)
        use_color: Force colours on/off; defaults to whether stderr is a TTY
        quiet_loggers: Logger names lowered to WARNING
    """
    if use_color is None:
        use_color = sys.stderr.isatty()

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_message_board_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(ColoredFormatter(use_color=use_color))
    handler._message_board_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level.upper())

    for logger_name in quiet_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
