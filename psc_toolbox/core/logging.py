from __future__ import annotations
import sys
from pathlib import Path
from loguru import logger
from .paths import logs_dir

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {name}:{function} | {message}"

def configure_logging(level: str = "INFO", console: bool = True) -> Path:
    """Replace loguru's default sink with the application sinks; returns the log file path."""
    logger.remove()
    log_path = logs_dir() / "psc_toolbox.log"
    logger.add(str(log_path), level="DEBUG", format=LOG_FORMAT, rotation="5 MB", retention=10, enqueue=True, backtrace=False, diagnose=False)
    if console:
        logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
    return log_path
