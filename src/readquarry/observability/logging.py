"""
Structured logging for ReadQuarry.

Extractor modules log through structlog; the config and metadata modules
use plain ``logging``. Both end up in one root handler whose
``ProcessorFormatter`` renders JSON for files and readable lines for a
terminal.
"""
from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

import structlog
from structlog.contextvars import get_contextvars

if TYPE_CHECKING:
    from readquarry.config.config import MonitoringConfig


def add_document_url(logger: logging.Logger, method_name: str, event_dict: Dict[Any, Any]) -> Dict[Any, Any]:
    """Tag every event emitted during an extraction with the document's base URL."""
    url = get_contextvars().get("document_url")
    if url is not None:
        event_dict.setdefault("document_url", url)
    return event_dict


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        add_document_url,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _handler_and_renderer(config: MonitoringConfig) -> Tuple[logging.Handler, Any]:
    if config.log_file:
        return logging.FileHandler(config.log_file, encoding="utf-8"), structlog.processors.JSONRenderer()
    handler = logging.StreamHandler(sys.stdout)
    if config.json_logs:
        return handler, structlog.processors.JSONRenderer()
    return handler, structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(config: MonitoringConfig) -> None:
    """Install one root handler for stdlib and structlog events at ``config.log_level``."""
    handler, renderer = _handler_and_renderer(config)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(config.log_level)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger("readquarry.logging").info(
        "Logging configured", level=config.log_level, output=config.log_file or "console"
    )
