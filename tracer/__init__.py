"""Trace context components for fieldprop."""

from fieldprop.tracer.current_trace_context import CurrentTraceContext
from fieldprop.tracer.trace_context import TraceContext, TraceContextOrSamplingFlags

__all__ = [
    "CurrentTraceContext",
    "TraceContext",
    "TraceContextOrSamplingFlags",
]
