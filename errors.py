"""Exceptions raised by fieldprop."""

from __future__ import annotations


class FieldPropError(Exception):
    """
    Root of the fieldprop exceptions.

    ``details`` holds the offending values (a field name, a config path) and
    is appended to the message when rendered.
    """

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({rendered})"


class ConfigError(FieldPropError):
    """Bad setup: no delegate, no field names, or an invalid fieldprop.toml / FIELDPROP_* value."""


class ValidationError(FieldPropError):
    """A context, field name or value was None at call time."""
