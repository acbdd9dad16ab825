"""Span processor that tags spans with the active extra fields."""

from __future__ import annotations

from typing import Iterable, Optional

from opentelemetry import context as context_api
from opentelemetry.sdk.trace import ReadableSpan, Span, SpanProcessor

from fieldprop.propagation.extra_field import get
from fieldprop.tracer.current_trace_context import CurrentTraceContext
from fieldprop.utils.helpers import normalize_field_name


class ExtraFieldSpanProcessor(SpanProcessor):
    """
    Copies extra fields of the active trace context to span attributes on start.

    Only the configured names are copied; unset fields are skipped.
    """

    def __init__(
        self,
        current_trace_context: CurrentTraceContext,
        names: Iterable[str],
        prefix: str = "",
    ) -> None:
        self.current_trace_context = current_trace_context
        self.names = tuple(normalize_field_name(name) for name in names)
        self.prefix = prefix

    def on_start(self, span: Span, parent_context: Optional[context_api.Context] = None) -> None:
        ctx = parent_context if parent_context is not None else context_api.get_current()
        trace_context = self.current_trace_context.get(ctx)
        if trace_context is None:
            return
        for name in self.names:
            value = get(trace_context, name)
            if value is not None:
                span.set_attribute(f"{self.prefix}{name}", value)

    def on_end(self, span: ReadableSpan) -> None:
        return None

    def shutdown(self) -> None:
        return None

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True
