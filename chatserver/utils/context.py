"""Context management for structured logging and tracing.

Request context (request id, authenticated user, current action) lives in
context variables so it follows a request across awaits without being
passed around explicitly.
"""

import contextvars
from contextlib import contextmanager
from typing import Optional, Any, Dict
from opentelemetry import trace

# Context variables for request/operation tracking
request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)
user_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "user_id", default=None
)
user_email_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "user_email", default=None
)
action_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "action", default=None
)

_VARS = {
    "request_id": request_id_var,
    "user_id": user_id_var,
    "user_email": user_email_var,
    "action": action_var,
}


def set_context(
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    user_email: Optional[str] = None,
    action: Optional[str] = None,
) -> None:
    """Set context variables. ``None`` leaves a variable unchanged.

    Args:
        request_id: Unique request identifier
        user_id: Authenticated user ID
        user_email: Authenticated user email
        action: Operation being performed (e.g. 'auth.login')
    """
    values = {
        "request_id": request_id,
        "user_id": user_id,
        "user_email": user_email,
        "action": action,
    }
    for key, value in values.items():
        if value is not None:
            _VARS[key].set(value)


def get_context() -> Dict[str, Any]:
    """Get all current context values as a dictionary.

    Returns:
        Dictionary with all non-None context values
    """
    context = {}
    for key, var in _VARS.items():
        value = var.get()
        if value:
            context[key] = value
    return context


def get_request_id() -> Optional[str]:
    """Get current request ID."""
    return request_id_var.get()


def get_user_id() -> Optional[str]:
    """Get current user ID."""
    return user_id_var.get()


def clear_context() -> None:
    """Clear all context variables."""
    for var in _VARS.values():
        var.set(None)


@contextmanager
def operation_context(
    action: str,
    user_id: Optional[str] = None,
    user_email: Optional[str] = None,
):
    """Set the action (and optionally the user) for the enclosed block.

    The previous context is restored on exit. The action is also recorded
    on the current span when one is recording.

    Example:
        with operation_context("auth.login", user_email="a@x.com"):
            logger.info("Logging in")
    """
    old_context = get_context()

    try:
        set_context(user_id=user_id, user_email=user_email, action=action)

        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("action", action)
            if user_id:
                span.set_attribute("user.id", user_id)

        yield

    finally:
        clear_context()
        for key, value in old_context.items():
            _VARS[key].set(value)


def get_trace_context() -> Dict[str, str]:
    """Get current OpenTelemetry trace context.

    Returns:
        Dictionary with trace_id and span_id (if available)
    """
    context = {}

    span = trace.get_current_span()
    if span.is_recording():
        span_context = span.get_span_context()
        if span_context.is_valid:
            context["trace_id"] = format(span_context.trace_id, "032x")
            context["span_id"] = format(span_context.span_id, "016x")

    return context
