"""Propagation schemes for fieldprop."""

from fieldprop.propagation.base import (
    Extractor,
    Injector,
    Propagation,
    PropagationFactory,
    string_key,
)
from fieldprop.propagation.extra_field import (
    Extra,
    ExtraFieldPropagation,
    current,
    get,
    new_factory,
    set,
)
from fieldprop.propagation.w3c import (
    W3C_FACTORY,
    W3CPropagation,
    format_traceparent,
    parse_traceparent,
    parse_tracestate,
)

__all__ = [
    "Extractor",
    "Injector",
    "Propagation",
    "PropagationFactory",
    "string_key",
    "Extra",
    "ExtraFieldPropagation",
    "current",
    "get",
    "new_factory",
    "set",
    "W3C_FACTORY",
    "W3CPropagation",
    "format_traceparent",
    "parse_traceparent",
    "parse_tracestate",
]
