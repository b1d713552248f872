"""
Centralized logging configuration for the alert screener.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the system should use this
configuration to ensure consistent formatting and structured logging.
"""
import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_caller: bool = False,
    stream: Optional[TextIO] = None,
    extra_processors: Optional[list] = None
) -> None:
    """
    Route structlog through stdlib logging to a single stream.

    Every event carries the logger name, level, a UTC ISO timestamp and any
    context bound with ``structlog.contextvars``. JSON output renders
    exceptions as structured tracebacks; console output colours only on a TTY.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Emit one JSON object per line instead of console text
        include_caller: Add module, function and line number to each event
        stream: Output stream, stdout by default
        extra_processors: Processors run just before rendering
    """
    stream = stream or sys.stdout
    logging.basicConfig(level=getattr(logging, level.upper()), stream=stream, format="%(message)s", force=True)

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.MODULE,
                        structlog.processors.CallsiteParameter.FUNC_NAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    processors.extend(extra_processors or [])

    if format_json:
        processors.extend([structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()])
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_evaluation_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for condition evaluation decisions.

    Every event from this logger carries the audit markers used to pick
    rule decisions out of the general log stream.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for rule decisions
    """
    return get_logger(name).bind(
        subsystem="conditions",
        audit_trail=True
    )


def get_acquisition_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for historical data acquisition.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for the acquisition policy
    """
    return get_logger(name).bind(subsystem="acquisition")


def log_rule_decision(
    logger: FilteringBoundLogger,
    rule_key: str,
    passed: bool,
    ticker: str,
    left: Optional[float],
    right: Optional[float],
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a single rule decision with standardized format.

    Args:
        logger: Structlog logger instance
        rule_key: Key of the rule being evaluated
        passed: Whether the rule passed
        ticker: Ticker being evaluated
        left: Resolved left operand (None when missing)
        right: Resolved right operand (None when missing)
        context: Additional context data
    """
    bound_logger = logger.bind(
        rule=rule_key,
        rule_result="PASS" if passed else "FAIL",
        ticker=ticker,
        left=left,
        right=right,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if passed:
        bound_logger.info("Rule passed")
    else:
        bound_logger.warning("Rule failed")


def log_data_quality_warning(
    logger: FilteringBoundLogger,
    ticker: str,
    kind: str,
    message: str,
    details: Optional[dict[str, Any]] = None
) -> None:
    """
    Log an advisory data quality finding.

    Args:
        logger: Structlog logger instance
        ticker: Ticker the data belongs to
        kind: Warning category (stale_data, time_misalignment, ...)
        message: Human readable description
        details: Measured values behind the warning
    """
    bound_logger = logger.bind(
        ticker=ticker,
        quality_issue=kind,
    )

    if details:
        bound_logger = bound_logger.bind(details=details)

    bound_logger.warning(message)
