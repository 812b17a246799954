"""
Logging setup for the receipt extraction pipeline.

Library modules only create named loggers; applications call
``setup_logging`` once to attach handlers to the package logger.
"""
import logging
import re
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
PACKAGE_LOGGER = "receipt_extraction"

_API_KEY_PATTERN = re.compile(r"([?&]key=)[^&]+")


def setup_logging(level: Union[int, str] = "INFO", log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure the package logger.

    Calling it again only updates the level, so handlers are never duplicated.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    if getattr(logger, "_receipt_configured", False):
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    logger._receipt_configured = True
    return logger


def redact_url(url: str) -> str:
    """Strip the API key query parameter so URLs can be logged."""
    return _API_KEY_PATTERN.sub(r"\1***", url)
