"""
Shared logging configuration for the ModelSignature SDK.
"""

import hashlib
import sys
import structlog
import logging
import uuid
from typing import Any, Dict, Optional
from contextvars import ContextVar

# Context variables for correlation IDs
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
token_id_var: ContextVar[Optional[str]] = ContextVar('token_id', default=None)

def configure_logging(log_level: str = "info") -> None:
    """Configure structured logging for the SDK.

    Libraries should not configure logging on import; applications call this
    once at startup if they want the SDK's JSON log format.
    """

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
            add_sdk_context,
            add_correlation_context,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

def add_sdk_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Tag events with the SDK component derived from the logger name."""
    logger_name = event_dict.get("logger", "")
    if "." in logger_name:
        event_dict["component"] = logger_name.split(".", 1)[1]

    return event_dict

def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add correlation context to log events."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id

    token_id = token_id_var.get()
    if token_id:
        event_dict["token_id"] = token_id

    return event_dict

def set_request_id(request_id: Optional[str] = None) -> str:
    """Set request ID in context."""
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id

def set_token_context(token: Optional[str]) -> Optional[str]:
    """Bind a short fingerprint of the token being processed."""
    token_id = token_fingerprint(token) if isinstance(token, str) and token else None
    token_id_var.set(token_id)
    return token_id

def clear_context():
    """Clear all context variables."""
    request_id_var.set(None)
    token_id_var.set(None)

def token_fingerprint(token: str) -> str:
    """Short, non-reversible identifier for a token; tokens are never logged."""
    return hashlib.sha256(token.encode("utf-8", "replace")).hexdigest()[:8]

def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
