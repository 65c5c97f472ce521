"""
Logging Configuration
=====================
loguru setup for the upload service.

Development gets a coloured console and a daily rotated file under ``logs/``;
every other environment writes one JSON document per line to stdout.
Standard library loggers from uvicorn, fastapi and botocore are routed
through loguru.
"""

import sys
import logging
from pathlib import Path
from typing import Optional

from loguru import logger

from upload_service.core.config import Settings, settings as default_settings


CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[logger_name]}</cyan> | "
    "<level>{message}</level> | "
    "{extra}"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message} | {extra}"

INTERCEPTED_LOGGERS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "uvicorn.error": logging.INFO,
    "fastapi": logging.INFO,
    "botocore": logging.WARNING,
}


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that made the logging call
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(logger_name=record.name).log(
            level, record.getMessage()
        )


def _add_console_sink(config: Settings) -> None:
    if config.is_development:
        logger.add(
            sys.stdout,
            format=CONSOLE_FORMAT,
            level="DEBUG" if config.DEBUG else "INFO",
            colorize=True,
            backtrace=True,
            diagnose=True,
        )
    else:
        logger.add(sys.stdout, level="INFO", serialize=True, backtrace=False, diagnose=False)


def _add_file_sink(log_dir: Path) -> None:
    log_dir.mkdir(exist_ok=True)
    logger.add(
        log_dir / "uploads_{time:YYYY-MM-DD}.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )


def setup_logging(config: Optional[Settings] = None) -> None:
    """
    Replace loguru's default sink with the environment's sinks

    Safe to call more than once; existing sinks are removed first.
    """
    config = config or default_settings

    logger.remove()
    logger.configure(extra={"logger_name": "upload_service"})

    _add_console_sink(config)
    if config.is_development:
        _add_file_sink(Path("logs"))

    for name, level in INTERCEPTED_LOGGERS.items():
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(level)
        std_logger.propagate = False

    logger.info("Logging configured for {} environment", config.ENVIRONMENT)


def get_logger(name: Optional[str] = None) -> logger:
    """
    Get a logger bound to a component name

    Args:
        name: Usually ``__name__`` of the calling module
    """
    if name:
        return logger.bind(logger_name=name)
    return logger
