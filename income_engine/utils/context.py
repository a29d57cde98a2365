# income_engine/utils/context.py
"""
Computation context management for the Portfolio Income Engine.

Callers (a web handler, a job runner) can tag every log line produced
while computing a snapshot with a correlation ID.

Uses Python's contextvars so the value follows the caller's thread or task.

Usage:
    from income_engine.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")
    correlation_id = get_correlation_id()  # Returns "abc-123"
"""

from contextvars import ContextVar

# =============================================================================
# CONTEXT VARIABLES
# =============================================================================

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


# =============================================================================
# CORRELATION ID
# =============================================================================

def get_correlation_id() -> str | None:
    """
    Get the current correlation ID.

    Returns:
        The correlation ID for the current context, or None if not set.
    """
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current context.

    Args:
        correlation_id: Unique identifier for this computation
    """
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID."""
    _correlation_id_var.set(None)
