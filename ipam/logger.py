"""Loguru setup shared by the server and library code."""

import logging
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

logger.configure(extra={"name": "ipam"})


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records (uvicorn, sqlalchemy) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(name=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging(level: str = "INFO") -> None:
    """Install a single stderr sink and route stdlib logging through it."""
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    # SQL echo only when explicitly asked for
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


def get_logger(name: str):
    """Return a loguru logger tagged with the calling module's name."""
    return logger.bind(name=name)
