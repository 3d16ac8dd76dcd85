"""
Structured Logger Module

Configures structlog for JSON-formatted structured logging with correlation IDs.
Every marketplace component logs through this module so a browsing session can
be traced end to end.

Example Usage:
    from researchmatch.utils.logger import get_logger

    logger = get_logger(
        correlation_id="a1b2c3d4-e5f6-7890-abcd-ef1234567890",
        phase="matching",
        component="match_controller"
    )

    logger.info("match_recorded", profile_id=12, outcome="confirmed_free")
    logger.warning("unknown_profile_id", profile_id=999)

Log Levels:
    - DEBUG: Filter evaluations, trigger evaluations
    - INFO: Matches recorded, quota changes, conversion prompt fired
    - WARNING: Rejected operations (invalid filters, unknown ids)
    - ERROR: Dataset or configuration failures
"""

import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

import structlog
from structlog.types import BindableLogger, EventDict, WrappedLogger

# Gated profile identity plus generic secrets
REDACTED_FIELDS = {
    "full_name",
    "fullname",
    "institution",
    "password",
    "api_key",
    "token",
    "secret",
}


def redact_identity(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Processor to redact gated identity fields and secrets from log output.

    Args:
        logger: Logger instance
        method_name: Logging method name
        event_dict: Event dictionary to process

    Returns:
        Event dictionary with redacted values

    Redacts:
        - Keys equal to a REDACTED_FIELDS entry, or ending in "_<entry>"
          (e.g. "matched_full_name", "access_token")
        - Replaces values with "***REDACTED***"
        - "institution_tier" is left intact since it is always public
    """
    for key in list(event_dict.keys()):
        key_lower = key.lower().replace("-", "_")
        for sensitive in REDACTED_FIELDS:
            if key_lower == sensitive or key_lower.endswith(f"_{sensitive}"):
                event_dict[key] = "***REDACTED***"
                break

    return event_dict


def configure_logging(
    log_file: Optional[str] = None, log_level: str = "INFO"
) -> None:
    """
    Configure structlog with JSON output, optionally also logging to a file.

    Args:
        log_file: Path to log file (default: None, stdout only)
        log_level: Logging level (default: "INFO")

    Log Format (JSON):
        {
            "timestamp": "2026-10-06T10:30:45Z",
            "level": "info",
            "correlation_id": "a1b2c3d4-...",
            "phase": "matching",
            "component": "match_controller",
            "event": "match_recorded",
            "profile_id": 12
        }
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_identity,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    correlation_id: Optional[str] = None,
    phase: Optional[str] = None,
    component: Optional[str] = None,
) -> BindableLogger:
    """
    Get structured logger with bound context.

    Args:
        correlation_id: Session correlation ID (generates UUID if not provided)
        phase: Marketplace phase (e.g., "browse", "matching", "engagement")
        component: Component name (e.g., "filter_engine", "match_controller")

    Returns:
        BoundLogger with correlation_id, phase, and component bound to context
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    logger = structlog.get_logger()

    if correlation_id:
        logger = logger.bind(correlation_id=correlation_id)
    if phase:
        logger = logger.bind(phase=phase)
    if component:
        logger = logger.bind(component=component)

    return logger


# Initialize logging on module import with default settings
configure_logging()
