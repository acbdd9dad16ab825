"""W3C trace context propagation using OpenTelemetry's standard propagator."""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from opentelemetry.trace import NonRecordingSpan, get_current_span, set_span_in_context
from opentelemetry.trace import SpanContext as OTelSpanContext, TraceFlags, TraceState
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

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
from fieldprop.utils.helpers import format_span_id, format_trace_id, parse_span_id, parse_trace_id

TRACEPARENT = "traceparent"
TRACESTATE = "tracestate"

# Use OTel's W3C Trace Context propagator
_propagator = TraceContextTextMapPropagator()


def parse_tracestate(header_value: Optional[str]) -> Dict[str, str]:
    """
    Parse a tracestate header into a dict.

    Parses W3C Trace Context tracestate format: key1=value1,key2=value2
    """
    if not header_value:
        return {}

    result = {}
    for item in header_value.split(","):
        item = item.strip()
        if not item or "=" not in item:
            continue
        key, value = item.split("=", 1)
        key = key.strip().lower()
        value = value.strip()
        if key and value:
            result[key] = value

    return result


def format_traceparent(context: TraceContext) -> str:
    """Format the traceparent header value for a context, or "" if it is invalid."""
    carrier: Dict[str, str] = {}
    _inject_w3c(context, carrier)
    return carrier.get(TRACEPARENT, "")


def parse_traceparent(header_value: str, tracestate: Optional[str] = None) -> Optional[TraceContext]:
    """Parse a traceparent (and optional tracestate) header into a TraceContext."""
    if not header_value:
        return None

    carrier = {TRACEPARENT: header_value}
    if tracestate:
        carrier[TRACESTATE] = tracestate
    return _extract_w3c(carrier)


def _inject_w3c(context: TraceContext, carrier: Dict[str, str]) -> None:
    otel_context = _to_otel_context(context)
    if not otel_context.is_valid:
        return
    span = NonRecordingSpan(otel_context)
    _propagator.inject(carrier, context=set_span_in_context(span))


def _extract_w3c(carrier: Dict[str, str]) -> Optional[TraceContext]:
    ctx = _propagator.extract(carrier)
    otel_context = get_current_span(context=ctx).get_span_context()
    if otel_context.is_valid:
        return _from_otel_context(otel_context)
    return None


def _to_otel_context(context: TraceContext) -> OTelSpanContext:
    """Convert a TraceContext to an OTel SpanContext."""
    trace_state = TraceState()
    parsed = parse_tracestate(context.trace_state)
    if parsed:
        trace_state = TraceState(list(parsed.items()))

    return OTelSpanContext(
        trace_id=parse_trace_id(context.trace_id),
        span_id=parse_span_id(context.span_id),
        is_remote=False,
        trace_flags=TraceFlags(context.trace_flags),
        trace_state=trace_state,
    )


def _from_otel_context(otel_context: OTelSpanContext) -> TraceContext:
    """Convert an OTel SpanContext to a TraceContext."""
    trace_state = None
    if otel_context.trace_state:
        trace_state = ",".join(f"{k}={v}" for k, v in otel_context.trace_state.items())

    return TraceContext(
        trace_id=format_trace_id(otel_context.trace_id),
        span_id=format_span_id(otel_context.span_id),
        trace_flags=1 if otel_context.trace_flags.sampled else 0,
        trace_state=trace_state,
    )


class _W3CInjector(Injector):
    def __init__(self, setter: Setter, keys: Dict[str, Any]) -> None:
        self.setter = setter
        self.keys = keys

    def inject(self, context: TraceContext, carrier: Any) -> None:
        headers: Dict[str, str] = {}
        _inject_w3c(context, headers)
        for name, value in headers.items():
            key = self.keys.get(name)
            if key is not None:
                self.setter(carrier, key, value)


class _W3CExtractor(Extractor):
    def __init__(self, getter: Getter, keys: Dict[str, Any]) -> None:
        self.getter = getter
        self.keys = keys

    def extract(self, carrier: Any) -> TraceContextOrSamplingFlags:
        headers: Dict[str, str] = {}
        for name, key in self.keys.items():
            value = self.getter(carrier, key)
            if value is not None:
                headers[name] = value

        context = _extract_w3c(headers) if TRACEPARENT in headers else None
        if context is None:
            return TraceContextOrSamplingFlags.EMPTY
        return TraceContextOrSamplingFlags(context=context)


class W3CPropagation(Propagation):
    """Propagates trace identity as W3C traceparent/tracestate headers."""

    class Factory(PropagationFactory):
        def supports_join(self) -> bool:
            return False

        def requires_128bit_trace_id(self) -> bool:
            return True

        def create(self, key_factory: KeyFactory) -> "W3CPropagation":
            return W3CPropagation(key_factory)

    def __init__(self, key_factory: KeyFactory) -> None:
        self._keys = {
            TRACEPARENT: key_factory(TRACEPARENT),
            TRACESTATE: key_factory(TRACESTATE),
        }

    def keys(self) -> Sequence[Any]:
        return tuple(self._keys.values())

    def injector(self, setter: Setter) -> Injector:
        return _W3CInjector(setter, self._keys)

    def extractor(self, getter: Getter) -> Extractor:
        return _W3CExtractor(getter, self._keys)


W3C_FACTORY = W3CPropagation.Factory()
