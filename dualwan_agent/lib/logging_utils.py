import logging
import os
import sys

from dualwan_agent.constants import IS_DEV


def supports_color():
    """
    Returns True if the running system's terminal supports color, and False otherwise.
    """
    # Check for explicit override
    if os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes"):
        return True
    if os.environ.get("NO_COLOR", "").lower() in ("1", "true", "yes"):
        return False

    is_a_tty = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

    # IDE consoles render color without being a TTY
    ide_support = any(
        env in os.environ for env in ["PYCHARM_HOSTED", "VSCODE_PID", "TERM_PROGRAM"]
    )

    return sys.platform != "win32" and (is_a_tty or ide_support)


USE_COLOR = supports_color()


# https://talyian.github.io/ansicolors/
class CustomFormatter(logging.Formatter):
    """Colored logging formatter, plain when the terminal has no color support"""

    dark_grey = "\x1b[38;5;244m"
    white = "\x1b[38;5;255m"
    orange = "\x1b[38;5;208m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"
    fmt = (
        "%(asctime)s | %(levelname)8s | %(name)s: %(message)s (%(filename)s:%(lineno)d)"
    )

    USE_COLOR = USE_COLOR

    FORMATS = {
        logging.DEBUG: dark_grey + fmt + reset,
        logging.INFO: white + fmt + reset,
        logging.WARNING: orange + fmt + reset,
        logging.ERROR: red + fmt + reset,
        logging.CRITICAL: bold_red + fmt + reset,
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno) if self.USE_COLOR else self.fmt
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


def create_console_handler(level=logging.DEBUG):
    """Create a console handler with the CustomFormatter"""
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(CustomFormatter())
    return handler


def create_file_handler(filename: str, level=logging.DEBUG):
    """Plain-text file handler for running detached"""
    handler = logging.FileHandler(filename, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CustomFormatter.fmt))
    return handler


def _env_level(name: str, default: int = logging.INFO) -> int:
    levels = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARN,
        "warning": logging.WARN,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    value = os.environ.get(name)
    if value is None:
        return default
    return levels.get(value.strip().lower(), default)


def setup_logging(level=logging.INFO, handlers=None):
    """Setup logging with custom formatter"""

    if IS_DEV:
        # Default to DEBUG for dev mode.
        level = logging.DEBUG

    # Allow env override for global app log level
    level = _env_level("DUALWAN_LOG_LEVEL", level)

    if handlers is None:
        handlers = [create_console_handler(level)]

    logging.basicConfig(encoding="utf-8", level=level, handlers=handlers, force=True)

    # Per-command debug lines can be tuned on their own
    logging.getLogger("dualwan_agent.utils").setLevel(
        _env_level("DUALWAN_COMMAND_LOG_LEVEL", level)
    )
    logging.getLogger("uvicorn.access").setLevel(
        logging.INFO if IS_DEV else logging.WARNING
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)
