import logging

from barpoints.core.config import settings


def setup_logging(level: str | None = None) -> logging.Logger:
    level = (level or settings.LOG_LEVEL or "INFO").upper()
    logger = logging.getLogger("barpoints")

    if logger.handlers:
        return logger

    logger.setLevel(level)
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(ch)
    return logger
