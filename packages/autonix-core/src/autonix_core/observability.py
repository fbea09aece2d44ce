"""Structured logging for the engine.

Engine modules log through ``structlog.get_logger(__name__)``; this module only
decides how those events are rendered. Credential values never reach a sink:
``mask_credentials`` runs before any renderer.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from autonix_core.config import EngineSettings

MASK = "***"

# Event keys whose values are replaced by MASK
SENSITIVE_KEYS = frozenset({"token", "password", "secret", "kubeconfig"})


def mask_credentials(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace the value of any sensitive key with a fixed mask."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = MASK
    return event_dict


def _shared_processors(add_timestamp: bool) -> list[Any]:
    chain: list[Any] = [structlog.processors.TimeStamper(fmt="iso")] if add_timestamp else []
    chain += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        mask_credentials,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    return chain


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Route structlog events through the stdlib root logger.

    Args:
        log_level: Root level name, e.g. "DEBUG" or "WARNING".
        json_format: Render one JSON object per event instead of console text.
        add_timestamp: Stamp events with an ISO-8601 ``timestamp`` key.
    """
    renderer = (
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[*_shared_processors(add_timestamp), renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=log_level.upper())


def configure_from_settings(settings: EngineSettings) -> None:
    """Apply AUTONIX_LOG_LEVEL and AUTONIX_LOG_FORMAT."""
    configure_logging(log_level=settings.log_level, json_format=settings.log_format == "json")
