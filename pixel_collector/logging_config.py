import logging
import os
from logging.handlers import RotatingFileHandler, SysLogHandler
from typing import List, Optional

from pixel_collector import config

APP_NAME = "pixel-collector"

_SYSLOG_SOCKET = "/dev/log"


def _journal_handler() -> Optional[logging.Handler]:
    try:
        from systemd.journal import JournalHandler

        return JournalHandler(SYSLOG_IDENTIFIER=APP_NAME)
    except Exception:
        if not os.path.exists(_SYSLOG_SOCKET):
            return None
        return SysLogHandler(address=_SYSLOG_SOCKET)


def configure_logging() -> logging.Logger:
    """Attach file and journal handlers to the ``pixel_collector`` logger once."""
    logger = logging.getLogger("pixel_collector")
    logger.setLevel(config.log_level())
    if getattr(logger, "_pixel_configured", False):
        return logger

    handlers: List[logging.Handler] = [
        RotatingFileHandler(config.log_file(), maxBytes=1_000_000, backupCount=5)
    ]
    journal = _journal_handler()
    if journal is not None:
        handlers.append(journal)

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    for handler in handlers:
        handler.setLevel(logging.ERROR)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger._pixel_configured = True
    return logger
