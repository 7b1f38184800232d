"""Logging infrastructure for Recipe Search Engine.

Provides centralized logging with configurable format (text/JSON) and level.
Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

Search code attaches context with extra=search_context(mode, query, page);
both formatters render it.
"""

import json
import logging
import os
import sys
from typing import Any, Optional

# Search context attached via logger.info(..., extra={...})
CONTEXT_FIELDS = ("search_mode", "query", "page")

# Queries longer than this are cut in text output
MAX_QUERY_DISPLAY = 40


def search_context(mode: Any, query: str, page: Optional[int] = None) -> dict[str, Any]:
    """Build the extra= mapping for a search log line.

    Args:
        mode: SearchMode member or its string value.
        query: Trimmed query text.
        page: 1-based page number, if the line concerns a single page.

    Returns:
        Dict with search_mode, query and (when given) page.
    """
    context: dict[str, Any] = {"search_mode": getattr(mode, "value", mode), "query": query}
    if page is not None:
        context["page"] = page
    return context


class JSONFormatter(logging.Formatter):
    """Formatter that outputs structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON string with timestamp, level, logger name, message, search
            context fields and optional traceback.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Include exception traceback if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Include search mode, query and page if present in record
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data)


class RichTextFormatter(logging.Formatter):
    """Formatter that outputs colored text with emoji icons."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "RESET": "\033[0m",       # Reset
    }

    # Emoji icons for each level
    ICONS = {
        "DEBUG": "🔍",
        "INFO": "🍳",
        "WARNING": "⚠️",
        "ERROR": "❌",
    }

    # Short tags for the search mode
    MODE_TAGS = {
        "keyword": "kw",
        "natural-language": "nl",
    }

    @classmethod
    def format_context(cls, record: logging.LogRecord) -> str:
        """Render search context as e.g. "[kw p2 'pasta']", or "" when absent."""
        parts = []
        mode = getattr(record, "search_mode", None)
        if mode is not None:
            parts.append(cls.MODE_TAGS.get(mode, str(mode)))
        page = getattr(record, "page", None)
        if page is not None:
            parts.append(f"p{page}")
        query = getattr(record, "query", None)
        if query is not None:
            if len(query) > MAX_QUERY_DISPLAY:
                query = query[: MAX_QUERY_DISPLAY - 3] + "..."
            parts.append(repr(query))
        return f"[{' '.join(parts)}] " if parts else ""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as colored text.

        Args:
            record: Log record to format.

        Returns:
            Formatted string with color codes, emoji icon and search context.
        """
        level = record.levelname
        color = self.COLORS.get(level, self.COLORS["RESET"])
        icon = self.ICONS.get(level, "")
        reset = self.COLORS["RESET"]

        # Format: YYYY-MM-DD HH:MM:SS
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")

        # Build message
        context = self.format_context(record)
        message = f"{color}{icon} {timestamp} {level:<8} {record.name:<20} {context}{record.getMessage()}{reset}"

        # Include exception traceback if present
        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def get_logger(name: str) -> logging.Logger:
    """Create and configure logger instance.

    Args:
        name: Logger name, typically module name.

    Returns:
        Configured logger instance.
    """
    logger_instance = logging.getLogger(name)

    # Return existing logger if already configured
    if logger_instance.handlers:
        return logger_instance

    # Read configuration from environment
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_type = os.getenv("LOG_TYPE", "text").lower()

    # Set log level
    log_level = getattr(logging, log_level_str, logging.INFO)
    logger_instance.setLevel(log_level)

    # Create console handler
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    # Choose and attach formatter
    if log_type == "json":
        formatter = JSONFormatter()
    else:
        formatter = RichTextFormatter()

    handler.setFormatter(formatter)
    logger_instance.addHandler(handler)

    return logger_instance


# Create module-level logger instance
logger = get_logger("recipe_search")

# Suppress verbose informational warnings from external libraries
# (these are debug-level messages that clutter output)
logging.getLogger("google.genai").setLevel(logging.WARNING)  # Gemini request logs
logging.getLogger("aiohttp").setLevel(logging.WARNING)  # aiohttp access/client logs
