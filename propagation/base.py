"""Propagation contracts: how a trace context is written to and read from a carrier."""

from __future__ import annotations

from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from fieldprop.tracer.trace_context import TraceContext, TraceContextOrSamplingFlags

K = TypeVar("K")

# Converts a field name into the carrier's key type.
KeyFactory = Callable[[str], Any]
# setter(carrier, key, value), e.g. dict.__setitem__
Setter = Callable[[Any, Any, str], None]
# getter(carrier, key) -> value or None, e.g. dict.get
Getter = Callable[[Any, Any], Optional[str]]


def string_key(name: str) -> str:
    """Key factory for carriers keyed by plain strings."""
    return name


class Injector:
    """Writes a trace context into a carrier."""

    def inject(self, context: TraceContext, carrier: Any) -> None:
        raise NotImplementedError


class Extractor:
    """Reads a trace context (or sampling flags) from a carrier."""

    def extract(self, carrier: Any) -> TraceContextOrSamplingFlags:
        raise NotImplementedError


class Propagation(Generic[K]):
    """A propagation scheme bound to one carrier key type."""

    def keys(self) -> Sequence[K]:
        """Carrier keys this scheme may read or write."""
        raise NotImplementedError

    def injector(self, setter: Setter) -> Injector:
        raise NotImplementedError

    def extractor(self, getter: Getter) -> Extractor:
        raise NotImplementedError


class PropagationFactory:
    """Creates Propagation instances for a given key factory."""

    def supports_join(self) -> bool:
        """True if a server may reuse the client's span id."""
        return False

    def requires_128bit_trace_id(self) -> bool:
        return False

    def create(self, key_factory: KeyFactory) -> Propagation:
        raise NotImplementedError

    def decorate(self, context: TraceContext) -> TraceContext:
        """Hook to attach extensions to a newly created context."""
        return context
