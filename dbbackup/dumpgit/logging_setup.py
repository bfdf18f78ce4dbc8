"""Root logger configuration for dumpgit."""

from __future__ import annotations

import logging

import json_log_formatter

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", log_format: str = "text") -> None:
    """Configure logging for a run.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_format: "json" for one JSON object per line, anything else for text
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers = [handler]
