import logging
import os
import sys
from typing import Any, Dict

import structlog

# Log levels that map onto GitHub Actions workflow commands
WORKFLOW_COMMANDS = {
    "critical": "error",
    "error": "error",
    "warning": "warning",
    "debug": "debug",
}

DROPPED_KEYS = ("timestamp", "logger", "level")


def escape_data(value: str) -> str:
    """Escape a workflow command message the way the Actions toolkit does."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class GitHubActionsRenderer:
    """Render events for the GitHub Actions log.

    Errors, warnings and debug events become workflow commands so the runner
    turns them into annotations; info events are printed as plain lines.
    Multi-line values are printed below the event line.
    """

    def __call__(self, _logger: Any, method_name: str, event_dict: Dict[str, Any]) -> str:
        level = event_dict.get("level", method_name)
        event = str(event_dict.pop("event", ""))
        for key in DROPPED_KEYS:
            event_dict.pop(key, None)

        blocks = []
        context = []
        for key, value in event_dict.items():
            if isinstance(value, str) and "\n" in value:
                blocks.append(value)
            else:
                context.append(f"{key}={value!r}")

        line = " ".join([event, *context]).strip()
        text = "\n".join([line, *blocks])

        command = WORKFLOW_COMMANDS.get(level)
        if command:
            return f"::{command}::{escape_data(text)}"
        return text


def configure_logging(log_level: str = "INFO", cache_logger_on_first_use: bool = True) -> None:
    """Configure structlog for the current environment.

    GitHub Actions gets workflow-command output, production gets JSON and
    local development gets the console renderer.

    Args:
        log_level: Standard library level name
        cache_logger_on_first_use: Pin module loggers to this configuration
            once they first log. Pass False when structlog is
            reconfigured later in the same process.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )

    if os.getenv("GITHUB_ACTIONS", "").lower() == "true":
        renderer = GitHubActionsRenderer()
    elif os.getenv("APP_ENV", "production").lower() == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=cache_logger_on_first_use,
    )
