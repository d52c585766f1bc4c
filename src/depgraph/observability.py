"""Structured logging and OpenTelemetry spans for depgraph.

This module provides:
- Structured logging setup via structlog
- OpenTelemetry span helpers for make() and individual build steps

Without an OpenTelemetry SDK configured, spans are no-ops.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

_logger: BoundLogger | None = None
_tracer: Tracer | None = None

TRACER_NAME = "depgraph"


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary.

    Returns:
        structlog BoundLogger instance.

    Example:
        >>> logger = get_logger()
        >>> logger.info("graph_compiled", nodes=4)
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for depgraph."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for depgraph.

    Embedding applications that already configure structlog do not need to
    call this.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Raises:
        ValueError: If log_level is not a known level name.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {log_level}"
        raise ValueError(msg)

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(1, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=level)


@contextmanager
def span(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
    log_start: bool = True,
    log_end: bool = True,
) -> Iterator[Span]:
    """Create an OpenTelemetry span with structured logging.

    Args:
        name: Span name (e.g., "make", "build_step").
        attributes: Optional span attributes.
        log_start: If True, log span start.
        log_end: If True, log span end.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with span("make", attributes={"depgraph.force": False}):
        ...     run_steps()
    """
    tracer = get_tracer()
    logger = get_logger()
    attrs = attributes or {}

    with tracer.start_as_current_span(
        f"{TRACER_NAME}.{name}", kind=SpanKind.INTERNAL, attributes=attrs
    ) as s:
        if log_start:
            logger.debug(f"{name}_started", **attrs)
        try:
            yield s
            s.set_status(Status(StatusCode.OK))
            if log_end:
                logger.debug(f"{name}_completed", **attrs)
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            logger.error(f"{name}_failed", error=str(exc), **attrs)
            raise


@contextmanager
def build_step(output: Path, dependencies: tuple[Path, ...]) -> Iterator[Span]:
    """Create a span around one build function invocation.

    Args:
        output: Output path being built.
        dependencies: Its direct dependencies.

    Yields:
        OpenTelemetry Span instance.
    """
    attrs: dict[str, Any] = {
        "depgraph.output": str(output),
        "depgraph.dependency_count": len(dependencies),
    }
    with span("build_step", attributes=attrs) as s:
        yield s
