"""Logging configuration helpers for the quiz engine."""

import logging
import os
from logging import Logger

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging() -> Logger:
    """Configure basic logging for the application and return the package logger."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("quiz_engine")
