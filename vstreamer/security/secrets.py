"""Load signing keys and storage credentials without leaking their values."""
from __future__ import annotations

import os
from typing import Final

__all__ = ["MissingSecretError", "require_secret", "is_placeholder"]


class MissingSecretError(RuntimeError):
    """Raised when a credential is absent or still holds a template value."""


# Values shipped in .env.example and docs; never valid credentials.
_TEMPLATE_VALUES: Final[frozenset[str]] = frozenset(
    {
        "changeme",
        "change-me",
        "placeholder",
        "secret",
        "your-jwt-secret",
        "your-spaces-key",
        "your-spaces-secret",
    }
)


def is_placeholder(value: str | None) -> bool:
    """Return True for empty values and known template strings."""

    if value is None:
        return True
    candidate = value.strip().lower()
    return candidate == "" or candidate in _TEMPLATE_VALUES


def require_secret(name: str) -> str:
    """Return the trimmed value of ``name`` or raise :class:`MissingSecretError`."""

    raw = os.getenv(name)
    if is_placeholder(raw):
        raise MissingSecretError(f"{name} must be set to a real credential")
    return raw.strip()
