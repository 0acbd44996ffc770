"""
Logging setup for the bot process and the local CLI.

Everything logs through the standard library (``logging.getLogger(__name__)``
in our modules, plus httpx, python-telegram-bot and uvicorn); structlog's
ProcessorFormatter renders those records as JSON lines for the deployed bot
or as colored console lines for the CLI.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import settings

# httpx logs every request URL at INFO, and explorer URLs carry API keys
QUIET_LOGGERS = ("httpx", "httpcore", "telegram", "telegram.ext", "uvicorn.access")


def setup_logging(log_level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """Route all stdlib logging through structlog.

    Args:
        log_level: Override log level (default: settings.log_level)
        json_logs: Render JSON lines instead of console output (default: settings.log_json)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    if json_logs is None:
        json_logs = settings.log_json

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
        pre_chain.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
