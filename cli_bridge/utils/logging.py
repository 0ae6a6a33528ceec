import logging
import sys


LOGGER_NAME = "cli-bridge"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _parse_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Configure the `cli-bridge` logger tree to write to stdout.

    Safe to call more than once: later calls only change the level.
    Unknown level names fall back to INFO.
    """
    level = _parse_level(level)
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)

    for handler in root.handlers:
        handler.setLevel(level)

    if not root.handlers:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(level)
        stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(stdout_handler)

    return root


def get_logger(name: str | None = None) -> logging.Logger:
    """Child of the `cli-bridge` logger, or the logger itself without a name."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)
