"""
Structured logging for the faucet.

Every record carries timestamp, level, logger and event_type, plus whatever
fields the call site passes (address, tx_hash, kind ...). JSON lines go to
stdout by default; LOG_FORMAT=console gives the human-readable renderer.
Signing-key fields are masked before rendering.

Imports nothing from sepolia_faucet so any module can import it first.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
_level = getattr(logging, LOG_LEVEL, None)
# Only real named levels (WARN, FATAL included); anything else is INFO
LOG_LEVEL_VALUE = _level if isinstance(_level, int) and _level > logging.NOTSET else logging.INFO

LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

_SECRET_KEYS = frozenset({"private_key", "privatekey", "secret"})


def _rename_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def _redact_secrets(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    for key in list(event_dict):
        if key.lower() in _SECRET_KEYS:
            event_dict[key] = "***"
    return event_dict


def configure_structlog() -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        _redact_secrets,
    ]
    if LOG_FORMAT == "json":
        processors += [_rename_event, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("faucet_transfer_sent", address=addr, tx_hash="0x...")

    JSON output: {"event_type": "faucet_transfer_sent", "address": "...",
    "tx_hash": "0x...", "timestamp": "...", "level": "info", "logger": "..."}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_request(address: str) -> structlog.BoundLogger:
    """Logger with the recipient address bound to every call."""
    return get_logger("sepolia_faucet.request").bind(address=address)
