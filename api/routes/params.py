"""Shared request parameter checks."""

from services.errors import InvalidArgumentError


def require_text(value: str, param: str) -> str:
    """Strip a search parameter, rejecting whitespace-only input."""
    value = value.strip()
    if not value:
        raise InvalidArgumentError(f"Query parameter '{param}' must not be blank")
    return value
