"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import re
import sys

import structlog

# Webhook tokens grant posting rights, so they never reach the logs.
_SECRET_KEYS = frozenset({"token", "authorization", "webhook_token"})

_SECRET_PATTERNS = [
    (
        re.compile(r"(/webhooks/\d+/)[\w\-\.]+"),
        r"\1***",
    ),
    (
        re.compile(r"\b(token|authorization)([\"']?\s*[:=]\s*[\"']?)[\w\-\.]{8,}", re.IGNORECASE),
        r"\1\2***",
    ),
    (
        re.compile(r"\b(bot|bearer)(\s+)[\w\-\.]{8,}", re.IGNORECASE),
        r"\1\2***",
    ),
]


def redact_secrets(
    _logger: structlog.types.WrappedLogger,
    _method: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    for key, value in list(event_dict.items()):
        if key.lower() in _SECRET_KEYS and value:
            event_dict[key] = "***"
            continue
        if not isinstance(value, str):
            continue
        for pattern, replacement in _SECRET_PATTERNS:
            value = pattern.sub(replacement, value)
        event_dict[key] = value
    return event_dict


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Route structlog through stdlib logging, rendered as console text or JSON."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    # httpx logs every request line at INFO
    for name in ("discord", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
