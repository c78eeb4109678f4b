"""
Logging setup for the SimSimi service.

setup_logging(settings) attaches a console handler and a daily file handler
to the root logger. Calling it again (a second create_app, a test with a
different log_dir) swaps the SimSimi handlers instead of stacking them.
"""
import logging
import re
import sys
from datetime import date
from typing import List

from simsimi.core.config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty at INFO: SQL echo, pool checkouts, and uvicorn's access line,
# which AuditMiddleware already covers with timing.
NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "uvicorn.access",
    "httpx",
)

_HANDLER_MARK = "_simsimi_handler"


def log_file_name(app_name: str, day: date) -> str:
    """simsimiapi_20240131.log for app_name "SimSimiAPI"."""
    slug = re.sub(r"[^a-z0-9]+", "_", app_name.lower()).strip("_")
    return f"{slug or 'app'}_{day:%Y%m%d}.log"


def _simsimi_handlers(root: logging.Logger) -> List[logging.Handler]:
    return [h for h in root.handlers if getattr(h, _HANDLER_MARK, False)]


def setup_logging(settings: Settings) -> logging.Logger:
    """
    Configure the root logger from settings.

    The console shows settings.log_level and above; the file under
    settings.log_dir receives everything.

    Returns:
        The root logger
    """
    root = logging.getLogger()
    for handler in _simsimi_handlers(root):
        root.removeHandler(handler)
        handler.close()

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = settings.log_dir / log_file_name(settings.app_name, date.today())
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.log_level.upper())
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)

    for handler in (console_handler, file_handler):
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        root.addHandler(handler)
    root.setLevel(logging.DEBUG)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.debug(f"Logging configured: env={settings.app_env} level={settings.log_level} file={log_file}")
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass __name__."""
    return logging.getLogger(name)


class LoggerMixin:
    """Gives a class a self.logger named after the class."""

    @property
    def logger(self) -> logging.Logger:
        return get_logger(self.__class__.__name__)
