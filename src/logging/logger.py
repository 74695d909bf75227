# src/logging/logger.py - v2
"""Logger factory with workflow-command, JSON and text formatters."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from cachedirs.logging.context import get_context

ROOT_LOGGER_NAME = "cachedirs"


class JsonFormatter(logging.Formatter):
    """Structured JSON log formatter, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context_dict = ctx.as_dict()
        if context_dict:
            log_entry["context"] = context_dict

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for local runs."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if ctx.cache_path:
            parts.append(f"[{ctx.cache_path}]")
        parts.append(f"- {record.getMessage()}")
        return " ".join(parts)


def _escape_command_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandFormatter(logging.Formatter):
    """GitHub Actions formatter.

    Warnings, errors and debug lines become ``::warning::``, ``::error::`` and
    ``::debug::`` workflow commands so the runner annotates them. Info lines are
    printed as-is.
    """

    _COMMANDS = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        ctx = get_context()
        if ctx.cache_path and record.levelno != logging.INFO:
            message = f"[{ctx.cache_path}] {message}"
        if record.exc_info and record.exc_info[1] is not None:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        command = self._COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{_escape_command_data(message)}"


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Configuration is applied by setup_logging()."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(level: str = "INFO", log_format: str = "github") -> None:
    """Configure the root cachedirs logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: Output format ("github", "json" or "text").
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates on re-init
    root_logger.handlers.clear()

    formatter: logging.Formatter
    if log_format == "json":
        formatter = JsonFormatter()
    elif log_format == "text":
        formatter = TextFormatter()
    else:
        formatter = WorkflowCommandFormatter()

    # Workflow commands are read from stdout
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
