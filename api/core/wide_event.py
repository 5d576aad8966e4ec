"""Request-scoped wide event for canonical log lines.

RequestTimingMiddleware initializes the dict at request start and emits it
once at request end; services and repositories enrich it in between.

Usage:
    from core.wide_event import set_wide_event_fields, set_wide_event_nested

    set_wide_event_fields(series_id=series.id)
    set_wide_event_nested("reconciliation", inserted=2, removed=1)
"""

from contextvars import ContextVar
from typing import Any

_wide_event: ContextVar[dict[str, Any]] = ContextVar("wide_event")


def init_wide_event() -> dict[str, Any]:
    """Initialize a new wide event dict for the current async context."""
    event: dict[str, Any] = {}
    _wide_event.set(event)
    return event


def get_wide_event() -> dict[str, Any]:
    """Get the current wide event dict. Returns empty dict if not initialized."""
    try:
        return _wide_event.get()
    except LookupError:
        return {}


def set_wide_event_fields(**kwargs: Any) -> None:
    """Set multiple fields on the current wide event.

    No-op outside request context (CLI, tests without middleware).
    """
    event = get_wide_event()
    if event:
        event.update(kwargs)


def set_wide_event_nested(category: str, **kwargs: Any) -> None:
    """Set fields in a nested category, e.g. {"reconciliation": {"inserted": 2}}.

    No-op outside request context.
    """
    event = get_wide_event()
    if not event:
        return
    event.setdefault(category, {}).update(kwargs)


def clear_wide_event() -> None:
    _wide_event.set({})
