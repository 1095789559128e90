"""
Structured logging configuration for the Demo Bank service.

All logs are JSON-formatted with these standard fields:
- timestamp: ISO 8601 timestamp
- event: The log event name (first positional argument)
- request_id: UUID for tracing requests end-to-end
- user_id: Authenticated user (when available)
- duration_ms: Operation duration in milliseconds
- outcome: Result of the operation (for transfer and login events)

Credentials are never passed to the logger.
"""
import logging
import sys
import uuid
from contextvars import ContextVar
from decimal import Decimal
from typing import Any, Optional

import structlog

# Context variables for request-scoped data
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")
user_id_ctx: ContextVar[str] = ContextVar("user_id", default="")


def add_context_vars(
    logger: structlog.typing.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Processor that adds context variables to log entries."""
    request_id = request_id_ctx.get()
    user_id = user_id_ctx.get()

    if request_id:
        event_dict["request_id"] = request_id
    if user_id and "user_id" not in event_dict:
        event_dict["user_id"] = user_id

    return event_dict


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with JSON output and context processors."""
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level.upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            add_context_vars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(default=str),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)


def set_request_context(request_id: str, user_id: Optional[Any] = None) -> None:
    """Set the request context for logging."""
    request_id_ctx.set(request_id)
    if user_id is not None:
        user_id_ctx.set(str(user_id))


def set_user_context(user_id: Any) -> None:
    """Attach the authenticated user to the current request context."""
    user_id_ctx.set(str(user_id))


def clear_request_context() -> None:
    """Clear the request context after request completion."""
    request_id_ctx.set("")
    user_id_ctx.set("")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())


def log_transfer(
    logger: structlog.stdlib.BoundLogger,
    user_id: int,
    transfer_id: int,
    from_account_id: int,
    to_account_id: int,
    amount: Decimal,
    duration_ms: float,
) -> None:
    """Log a completed transfer with standard fields."""
    logger.info(
        "transfer_completed",
        user_id=user_id,
        outcome="success",
        transfer_id=transfer_id,
        from_account_id=from_account_id,
        to_account_id=to_account_id,
        amount=str(amount),
        duration_ms=round(duration_ms, 2),
    )
