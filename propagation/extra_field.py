"""
Propagates predefined request-scoped fields alongside the trace identity.

For example, to pass the Cloud Foundry request id through every hop::

    factory = new_factory(W3C_FACTORY, "x-vcap-request-id")

    # later, read it for tagging or log correlation
    request_id = current("x-vcap-request-id")

    # or set/override it, e.g. at the edge of a new request
    current("x-country-code", "FO")

The same mechanism passes through a trace header you don't report to, such
as ``x-amzn-trace-id``, so another tracing system keeps working alongside.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from fieldprop import runtime_config
from fieldprop.errors import ConfigError, ValidationError
from fieldprop.propagation.base import (
    Extractor,
    Getter,
    Injector,
    KeyFactory,
    Propagation,
    PropagationFactory,
    Setter,
)
from fieldprop.tracer.trace_context import TraceContext, TraceContextOrSamplingFlags
from fieldprop.utils.helpers import normalize_field_name

logger = logging.getLogger(__name__)

_UNSET = object()


class Extra:
    """
    Mutable field store carried in ``TraceContext.extra``.

    One instance is shared by every context derived from the context that
    received it, so a value set on a child is visible to the parent and to
    siblings on other threads. This sharing is intentional: it is what lets
    ``current(name, value)`` affect downstream calls without threading the
    context through application code.
    """

    def __init__(self) -> None:
        self._fields: Dict[str, str] = {}
        self._lock = threading.Lock()

    def set(self, name: str, value: str) -> None:
        with self._lock:
            self._fields[name] = value

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            return self._fields.get(name)

    def items(self) -> List[Tuple[str, str]]:
        """Point-in-time copy of the fields in insertion order."""
        with self._lock:
            return list(self._fields.items())

    def set_all(self, carrier: Any, setter: Setter, name_to_key: Dict[str, Any]) -> None:
        # Copy under the lock, write without it: the setter may block or re-enter.
        for name, value in self.items():
            key = name_to_key.get(name)
            if key is None:
                continue
            setter(carrier, key, value)

    def __str__(self) -> str:
        fields = ", ".join(f"{name}={value}" for name, value in self.items())
        return f"ExtraFieldPropagation{{{fields}}}"

    __repr__ = __str__


class ExtraFieldInjector(Injector):
    def __init__(self, delegate: Injector, setter: Setter, name_to_key: Dict[str, Any]) -> None:
        self.delegate = delegate
        self.setter = setter
        self.name_to_key = name_to_key

    def inject(self, context: TraceContext, carrier: Any) -> None:
        extra = context.find_extra(Extra)
        if extra is not None:
            extra.set_all(carrier, self.setter, self.name_to_key)
        self.delegate.inject(context, carrier)


class ExtraFieldExtractor(Extractor):
    def __init__(self, delegate: Extractor, getter: Getter, name_to_key: Dict[str, Any]) -> None:
        self.delegate = delegate
        self.getter = getter
        self.name_to_key = name_to_key

    def extract(self, carrier: Any) -> TraceContextOrSamplingFlags:
        result = self.delegate.extract(carrier)

        extra = Extra()  # always allocate in case fields are added later
        for name, key in self.name_to_key.items():
            value = self.getter(carrier, key)
            if value is None:
                continue
            extra.set(name, value)
        return result.add_extra(extra)


class ExtraFieldPropagation(Propagation):
    """Wraps a delegate propagation, adding the configured extra field keys."""

    class Factory(PropagationFactory):
        def __init__(self, delegate: PropagationFactory, names: Optional[Iterable[str]]) -> None:
            if delegate is None:
                raise ConfigError("delegate propagation factory is required")
            if names is None:
                raise ConfigError("extra field names are required")

            canonical: Dict[str, None] = {}
            for name in names:
                if not isinstance(name, str):
                    raise ConfigError("extra field names must be strings", {"name": name})
                canonical.setdefault(normalize_field_name(name), None)
            if not canonical:
                raise ConfigError("at least one extra field name is required")

            self.delegate = delegate
            self.names: Tuple[str, ...] = tuple(canonical)
            logger.debug(
                f"Extra field propagation over {type(delegate).__name__}: {', '.join(self.names)}"
            )

        def supports_join(self) -> bool:
            return self.delegate.supports_join()

        def requires_128bit_trace_id(self) -> bool:
            return self.delegate.requires_128bit_trace_id()

        def create(self, key_factory: KeyFactory) -> "ExtraFieldPropagation":
            name_to_key = {name: key_factory(name) for name in self.names}
            return ExtraFieldPropagation(self.delegate.create(key_factory), name_to_key)

        def decorate(self, context: TraceContext) -> TraceContext:
            result = self.delegate.decorate(context)
            if result.find_extra(Extra) is not None:
                return result
            return result.with_extra(result.extra + (Extra(),))

    def __init__(self, delegate: Propagation, name_to_key: Dict[str, Any]) -> None:
        self.delegate = delegate
        self.name_to_key = name_to_key
        self._keys = tuple(delegate.keys()) + tuple(name_to_key.values())

    def keys(self) -> Sequence[Any]:
        return self._keys

    def injector(self, setter: Setter) -> Injector:
        return ExtraFieldInjector(self.delegate.injector(setter), setter, self.name_to_key)

    def extractor(self, getter: Getter) -> Extractor:
        return ExtraFieldExtractor(self.delegate.extractor(getter), getter, self.name_to_key)


def new_factory(delegate: PropagationFactory, *names) -> ExtraFieldPropagation.Factory:
    """
    Wrap an underlying propagation factory, pushing one or more extra fields.

    Names can be passed as arguments or as a single iterable::

        new_factory(W3C_FACTORY, "x-vcap-request-id", "x-amzn-trace-id")
        new_factory(W3C_FACTORY, ["x-vcap-request-id", "x-amzn-trace-id"])
    """
    if len(names) == 1 and not isinstance(names[0], str):
        names = names[0]
    return ExtraFieldPropagation.Factory(delegate, names)


def get(context: TraceContext, name: str) -> Optional[str]:
    """Return the value of the named field, or None if not available."""
    if context is None:
        raise ValidationError("context is required")
    if name is None:
        raise ValidationError("name is required")
    name = normalize_field_name(name)
    extra = context.find_extra(Extra)
    return extra.get(name) if extra is not None else None


def set(context: TraceContext, name: str, value: str) -> None:
    """
    Set the value of the named field.

    Does nothing when the context was not decorated with an extra field store.
    """
    if context is None:
        raise ValidationError("context is required")
    if name is None:
        raise ValidationError("name is required")
    name = normalize_field_name(name)
    if value is None:
        raise ValidationError("value is required", {"name": name})
    extra = context.find_extra(Extra)
    if extra is not None:
        extra.set(name, value)


def resolve_current_context(resolver: Any = None) -> Optional[TraceContext]:
    """Active trace context from ``resolver``, else the registered resolver, else None."""
    if resolver is None:
        resolver = runtime_config.get_current_trace_context()
    if resolver is None:
        return None
    return resolver.get()


def current(name: str, value: Any = _UNSET, *, current_trace_context: Any = None) -> Optional[str]:
    """
    Read or write a field on the active trace context.

    ``current(name)`` returns the value or None; ``current(name, value)``
    sets it. Both do nothing when no trace context is active.

    Args:
        name: Field name, any casing
        value: Value to set; omit to read
        current_trace_context: Resolver with a ``get()`` method; defaults to the
            one registered by ``fieldprop.init()``
    """
    context = resolve_current_context(current_trace_context)
    if value is _UNSET:
        return get(context, name) if context is not None else None
    if context is not None:
        set(context, name, value)
    return None
