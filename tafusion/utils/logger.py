"""Logging setup based on loguru."""
import sys
from typing import Optional

from loguru import logger


# Records from this package are dropped until setup_logger() is called
logger.disable("tafusion")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{line} - {message}"

_handler_ids: list[int] = []


def setup_logger(
    log_file: Optional[str] = "logs/tafusion.log",
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "30 days",
    console: bool = True,
) -> None:
    """Enable tafusion logging and install its sinks.

    Calling again replaces the sinks installed by the previous call and
    leaves any handlers the application added itself untouched.

    Args:
        log_file: Path of the rotating log file, None for no file
        level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        rotation: Size at which the file is rotated
        retention: How long rotated files are kept
        console: Also write to stderr
    """
    while _handler_ids:
        logger.remove(_handler_ids.pop())

    logger.configure(extra={"name": "tafusion"})

    if console:
        _handler_ids.append(logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT))

    if log_file is not None:
        _handler_ids.append(
            logger.add(
                log_file,
                level=level,
                format=FILE_FORMAT,
                rotation=rotation,
                retention=retention,
                encoding="utf-8",
            )
        )

    logger.enable("tafusion")


def get_logger(name: str):
    """Return a logger bound to a module name.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        loguru logger with ``name`` in its extra dict
    """
    return logger.bind(name=name)
