import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from gamezone.config import LOG_FILE, LOG_LEVEL

_LOGGER_NAME = "gamezone"


def _configure_logger() -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    handler: logging.Handler
    if LOG_FILE:
        try:
            handler = RotatingFileHandler(Path(LOG_FILE), maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        except OSError:
            handler = logging.StreamHandler()
    else:
        handler = logging.StreamHandler()

    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


_configure_logger()


def get_logger(name: str) -> logging.Logger:
    """Child logger of the application logger, e.g. get_logger("sessions")"""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def log_event(area: str, action: str, detail: str = "") -> None:
    message = f"{area.upper()} | {action}"
    if detail:
        message += f" | {detail}"
    logging.getLogger(_LOGGER_NAME).info(message)
