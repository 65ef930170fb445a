"""
Centralized logging configuration for the vault orchestration layer.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the system should use this
configuration to ensure consistent formatting and structured logging.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    # Convert string level to logging constant
    log_level = getattr(logging, level.upper())

    # Configure standard library logging
    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    # Build processor chain
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    # Add final formatting processor
    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

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


def get_orchestrator_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for operation orchestration.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for orchestrator phase changes
    """
    return get_logger(name).bind(
        subsystem="orchestrator",
        audit_trail=True
    )


def log_phase_transition(
    logger: FilteringBoundLogger,
    invocation_id: str,
    operation: str,
    from_phase: str,
    to_phase: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log an orchestrator phase transition with standardized format.

    Args:
        logger: Structlog logger instance
        invocation_id: ID of the orchestrator invocation
        operation: Operation kind being executed
        from_phase: Current phase
        to_phase: Target phase
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        invocation_id=invocation_id,
        operation=operation,
        from_phase=from_phase,
        to_phase=to_phase,
        trigger=trigger,
        event="phase_transition"
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if to_phase == "failed":
        bound_logger.warning("Phase transition")
    else:
        bound_logger.info("Phase transition")


def log_gas_substitution(
    logger: FilteringBoundLogger,
    operation: str,
    network: str,
    reasons: tuple[str, ...],
    profile: dict[str, int]
) -> None:
    """
    Log that a safe default gas profile replaced an invalid one.

    Args:
        logger: Structlog logger instance
        operation: Operation kind being built
        network: Network the profile was resolved for
        reasons: Why the resolved profile was rejected
        profile: The substituted profile
    """
    logger.bind(
        operation=operation,
        network=network,
        reasons=list(reasons),
        profile=profile,
        event="gas_substitution"
    ).warning("Gas settings validation failed, using safe defaults")
