import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s: %(message)s"


def setup_logger(name: str = "ai_chat_guard", level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger  # avoid duplicate handlers

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
