import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Framework loggers that flood the console at INFO on every page refresh.
NOISY_LOGGERS = ("uvicorn.access", "watchfiles", "nicegui")


def configure_logging(level: str = "INFO") -> int:
    """Route every logger to stdout at ``level``; returns the numeric level applied."""
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    # Re-running main() in the same process must not stack handlers.
    for old in list(root_logger.handlers):
        root_logger.removeHandler(old)
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    if numeric_level == logging.INFO and str(level).upper() != "INFO":
        logging.getLogger(__name__).warning("Unknown log level %r, using INFO", level)
    return numeric_level
