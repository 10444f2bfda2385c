"""Structlog configuration for the application.

Every event carries the service name so that logs from several
deployments sharing one sink can be told apart. Development terminals get
colored console output, everything else gets one JSON object per line.
"""

import logging
import os
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog


def _service_name_adder(service: str) -> structlog.types.Processor:
    def add_service_name(
        logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        event_dict.setdefault("service", service)
        return event_dict

    return add_service_name


def _use_colors() -> bool:
    # FORCE_COLOR=1 enables colors even in non-TTY environments (like Docker)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return force_color or sys.stdout.isatty()


def configure_logging(service: str = "tenantry-api", debug: bool = False) -> None:
    """Configure structlog processors and the minimum level.

    Args:
        service: Value of the ``service`` key on every event.
        debug: Emit debug-level events (tenant resolution, cache hits).
            Info and above otherwise.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _service_name_adder(service),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: list[structlog.types.Processor]
    if _use_colors():
        renderer = [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        renderer = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=[*shared_processors, *renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
