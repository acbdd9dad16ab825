"""HTTP client helpers for context propagation."""

from __future__ import annotations

from typing import Dict, Optional

from fieldprop.propagation.base import Propagation
from fieldprop.propagation.extra_field import resolve_current_context
from fieldprop.tracer.trace_context import TraceContext


def inject_headers(
    headers: Dict[str, str],
    propagation: Propagation,
    context: Optional[TraceContext] = None,
    current_trace_context=None,
) -> Dict[str, str]:
    """
    Inject the given (or active) trace context and its extra fields into headers.

    Does nothing when there is no context to inject. Returns the same headers
    mapping for convenience.
    """
    if context is None:
        context = resolve_current_context(current_trace_context)
    if context is not None:
        propagation.injector(dict.__setitem__).inject(context, headers)
    return headers
