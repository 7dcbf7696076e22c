import logging
import os
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


def setup_logger(name: str = "topposts", level: str | None = None) -> logging.Logger:
    """Attach a stdout handler to the package logger.

    Module loggers (`topposts.services.cache`, ...) inherit it. The level comes
    from `level`, else LOG_LEVEL, else INFO. Calling it again replaces the handler.
    """
    log_level = getattr(logging, (level or os.getenv("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger
