"""Span processors."""

from fieldprop.processors.extra_field_processor import ExtraFieldSpanProcessor

__all__ = [
    "ExtraFieldSpanProcessor",
]
