"""
Logging configuration for the What-If backend.

Two streams are configured here:
- the application log (root logger): console, rotating ``whatif.log`` and an
  errors-only ``errors.log``
- the HTTP access log (``whatif.http``): one line per request, written to the
  console and a rotating ``access.log`` but kept out of ``whatif.log``

Persistence failures from the simulation routes land in both ``whatif.log``
and ``errors.log`` with their traceback.
"""

import logging
import logging.handlers
import os

from whatif import config

APP_LOG_FILE = os.path.join(config.LOG_DIR, 'whatif.log')
ERROR_LOG_FILE = os.path.join(config.LOG_DIR, 'errors.log')
ACCESS_LOG_FILE = os.path.join(config.LOG_DIR, 'access.log')

ACCESS_LOGGER_NAME = "whatif.http"

DETAILED_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s'
ACCESS_FORMAT = '%(asctime)s | %(method)s %(path)s | %(status)s | %(duration_ms).1fms'


def _rotating(path: str, max_mb: int, backups: int) -> logging.Handler:
    return logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_mb*1024*1024,
        backupCount=backups,
        encoding='utf-8'
    )


def setup_logging(level: str = "INFO"):
    """
    Configure application and access logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    os.makedirs(config.LOG_DIR, exist_ok=True)

    detailed_formatter = logging.Formatter(fmt=DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    console_formatter = logging.Formatter(
        fmt='%(asctime)s | %(levelname)-8s | %(message)s',
        datefmt='%H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    app_handler = _rotating(APP_LOG_FILE, 10, 5)
    app_handler.setLevel(log_level)
    app_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(app_handler)

    error_handler = _rotating(ERROR_LOG_FILE, 5, 3)
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_handler)

    # Access lines carry structured fields and do not propagate to the app log
    access_logger = logging.getLogger(ACCESS_LOGGER_NAME)
    access_logger.setLevel(logging.INFO)
    access_logger.propagate = False
    access_logger.handlers.clear()
    access_formatter = logging.Formatter(fmt=ACCESS_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    access_console = logging.StreamHandler()
    access_console.setFormatter(access_formatter)
    access_logger.addHandler(access_console)
    access_file = _rotating(ACCESS_LOG_FILE, 10, 5)
    access_file.setFormatter(access_formatter)
    access_logger.addHandler(access_file)

    # uvicorn's own access log would duplicate whatif.http
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    root_logger.info(f"Logging configured at level: {level}")
    root_logger.info(f"Log files: {APP_LOG_FILE}, {ERROR_LOG_FILE}, {ACCESS_LOG_FILE}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Usually __name__ of the calling module
    """
    return logging.getLogger(name)


def log_access(method: str, path: str, status: int, duration_ms: float):
    """Write one access line for a finished request."""
    logging.getLogger(ACCESS_LOGGER_NAME).info(
        "request",
        extra={"method": method, "path": path, "status": status, "duration_ms": duration_ms},
    )


# Initialize logging when this module is imported
setup_logging(config.LOG_LEVEL)
