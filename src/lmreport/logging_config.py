from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

from lmreport.config import get_settings

# Track if logging has been configured to prevent re-initialization
_configured = False


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records (uvicorn, httpx) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level_name = logger.level(record.levelname).name
        except ValueError:
            level_name = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level_name, record.getMessage()
        )


def configure_logging(
    level: str | None = None,
    log_dir: Path | None = None,
    force: bool = False,
) -> None:
    """
    Configure loguru sinks and route standard logging through loguru.
    - level: minimum level; defaults to settings.LOG_LEVEL, else DEBUG in
      development and INFO otherwise.
    - log_dir: also write a timestamped log file there (defaults to settings.LOG_DIR).
    """
    global _configured
    if _configured and not force:
        return

    settings = get_settings()
    env = settings.ENV.lower()
    if level is None:
        level = settings.LOG_LEVEL or ("DEBUG" if env == "development" else "INFO")
    level = level.upper()
    if log_dir is None:
        log_dir = settings.LOG_DIR

    logger.remove()

    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        backtrace=True,
        diagnose=env == "development",
        colorize=None,
    )

    log_file_path = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file_path = log_dir / f"{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.log"
        logger.add(
            log_file_path,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            enqueue=True,
            encoding="utf-8",
        )

    stdlib_level = logging.getLevelName(level)
    if not isinstance(stdlib_level, int):  # loguru-only levels: TRACE, SUCCESS
        stdlib_level = logging.DEBUG
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(stdlib_level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.setLevel(stdlib_level)
        uvicorn_logger.propagate = False

    _configured = True
    logger.debug(f"Logging configured: level={level}, environment={env}, log_file={log_file_path}")
