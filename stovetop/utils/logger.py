"""Logging for the stovetop recipe core.

Every line can carry the cooking context it was logged in: pass any of
`recipe`, `session_id` or `step_index` through `extra=` and both formatters
will render it (a "[Fried Rice · step 3]" tag in text, top-level keys in JSON).

Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)
- NO_COLOR: set to any value to drop ANSI colors from text output
"""

import json
import logging
import os
import sys
from typing import Any, Dict, Optional, Tuple


CONTEXT_FIELDS = ("recipe", "session_id", "step_index")


def session_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Cooking-context extras attached to a record, in a fixed order."""
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


def context_tag(context: Dict[str, Any]) -> str:
    """Short human tag such as "[Fried Rice · step 3]"; steps are shown 1-based."""
    parts = []
    if "recipe" in context:
        parts.append(str(context["recipe"]))
    if "step_index" in context:
        parts.append(f"step {context['step_index'] + 1}")
    if "session_id" in context:
        parts.append(str(context["session_id"]))
    return f"[{' · '.join(parts)}]" if parts else ""


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with cooking context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **session_context(record),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False)


class RichTextFormatter(logging.Formatter):
    """Colored single-line text with a level emoji and the cooking context tag.

    Args:
        use_color: Wrap each line in the level's ANSI color.
    """

    RESET = "\033[0m"

    # level -> (ANSI color, icon)
    LEVEL_STYLES: Dict[str, Tuple[str, str]] = {
        "DEBUG": ("\033[36m", "🔍"),
        "INFO": ("\033[32m", "ℹ️"),
        "WARNING": ("\033[33m", "⚠️"),
        "ERROR": ("\033[31m", "❌"),
    }

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color, icon = self.LEVEL_STYLES.get(level, (self.RESET, ""))
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        tag = context_tag(session_context(record))

        line = f"{icon} {timestamp} {level:<8} {record.name:<12} "
        if tag:
            line += f"{tag} "
        line += record.getMessage()

        if self.use_color:
            line = f"{color}{line}{self.RESET}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def _resolve_level(value: Optional[str]) -> int:
    return getattr(logging, (value or "INFO").upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Create and configure a logger writing to stderr.

    Calling it again for the same name returns the configured logger without
    adding another handler.

    Args:
        name: Logger name.

    Returns:
        Configured logger instance.
    """
    logger_instance = logging.getLogger(name)
    if logger_instance.handlers:
        return logger_instance

    log_level = _resolve_level(os.getenv("LOG_LEVEL"))
    logger_instance.setLevel(log_level)

    # stdout belongs to the CLI output
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    if os.getenv("LOG_TYPE", "text").lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(RichTextFormatter(use_color="NO_COLOR" not in os.environ))

    logger_instance.addHandler(handler)
    logger_instance.propagate = False
    return logger_instance


logger = get_logger("stovetop")
