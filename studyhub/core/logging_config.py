"""
Logging setup shared by the API process and the worker process.

Every record carries the process role ("api" or "worker") so interleaved
output from both processes stays readable. Level and optional file output
come from LOG_LEVEL, LOG_TO_FILE and LOG_DIR.
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"

CONSOLE_FORMAT = "%(asctime)s [{role}] %(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s [{role}] %(levelname)s %(name)s (%(filename)s:%(lineno)d): %(message)s"

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "kombu", "amqp", "openai", "anthropic", "pymongo", "aiosmtplib")


def setup_logging(
    role: str = "api",
    log_level: str = LOG_LEVEL,
    log_file: Optional[str] = None,
    enable_file_logging: bool = LOG_TO_FILE,
) -> None:
    """
    Configure the root logger for one process.

    Args:
        role: Process role shown in every line ("api" or "worker")
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_file: File path when file logging is on (defaults to logs/<role>.log)
        enable_file_logging: Also write DEBUG and above to a file
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT.format(role=role), datefmt="%H:%M:%S"))
    root_logger.addHandler(console_handler)

    if enable_file_logging:
        log_path = Path(log_file) if log_file else LOG_DIR / f"{role}.log"
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT.format(role=role), datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with ``__name__``."""
    return logging.getLogger(name)
