"""
bootstrap/logs.py - Logging setup for applications embedding the engine.
"""

from __future__ import annotations
import json
import logging
import sys
from dataclasses import replace
from typing import Optional

from .config import LoggingConfig




class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record):
        return json.dumps({
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(config: Optional[LoggingConfig] = None, **overrides) -> logging.Logger:
    """
    Configure application logging.

    Args:
        config: Logging section; read from the environment when omitted
        **overrides: LoggingConfig fields to replace (level, format,
            log_file, json_logs)

    Returns:
        The configured root logger
    """
    config = replace(config or LoggingConfig.from_env(), **overrides)
    log_level = getattr(logging, config.level.upper(), logging.INFO)

    if config.json_logs:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(config.format)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # File handler
    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)

    return root_logger
