"""
Shared logging configuration for the Annotator.
"""

import sys
import structlog
import logging
import uuid
from typing import Any, Dict, Optional
from contextvars import ContextVar

# Context variables for reconcile correlation
reconcile_id_var: ContextVar[Optional[str]] = ContextVar('reconcile_id', default=None)
object_kind_var: ContextVar[Optional[str]] = ContextVar('object_kind', default=None)
object_ref_var: ContextVar[Optional[str]] = ContextVar('object_ref', default=None)


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Configure structured logging for a service."""

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service_context,
            add_reconcile_context,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )
    logging.getLogger(service_name).setLevel(getattr(logging, log_level.upper()))


def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add service context to log events."""
    # Extract service name from logger name
    logger_name = event_dict.get("logger", "")
    if "." in logger_name:
        event_dict["service"] = logger_name.split(".")[0]

    return event_dict


def add_reconcile_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add reconcile correlation context to log events."""
    reconcile_id = reconcile_id_var.get()
    if reconcile_id:
        event_dict["reconcile_id"] = reconcile_id

    object_kind = object_kind_var.get()
    if object_kind:
        event_dict["object_kind"] = object_kind

    object_ref = object_ref_var.get()
    if object_ref:
        event_dict["object_ref"] = object_ref

    return event_dict


def set_reconcile_context(kind: str, namespace: str, name: str,
                          reconcile_id: Optional[str] = None) -> str:
    """Set reconcile context for the object being processed."""
    if reconcile_id is None:
        reconcile_id = str(uuid.uuid4())
    reconcile_id_var.set(reconcile_id)
    object_kind_var.set(kind)
    object_ref_var.set(f"{namespace}/{name}")
    return reconcile_id


def clear_context():
    """Clear all context variables."""
    reconcile_id_var.set(None)
    object_kind_var.set(None)
    object_ref_var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
