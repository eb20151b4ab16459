from loguru import logger
import logging
import sys
from kwollect_input.config.settings import settings

logger.remove()
logger.add(
    sys.stdout,
    level=settings.LOG_LEVEL,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan> | {message}",
)


class InterceptHandler(logging.Handler):
    """Forward stdlib records (apscheduler, uvicorn) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


for _name in ("apscheduler", "uvicorn", "uvicorn.error", "uvicorn.access"):
    _std = logging.getLogger(_name)
    _std.handlers = [InterceptHandler()]
    _std.propagate = False

__all__ = ["logger"]
