"""
FastAPI middleware helpers for propagating extra fields across HTTP requests.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from fieldprop.instrumentation.http_server import extract_headers
from fieldprop.propagation.base import PropagationFactory, string_key
from fieldprop.tracer.current_trace_context import CurrentTraceContext

logger = logging.getLogger(__name__)

STATE_ATTRIBUTE = "fieldprop_extracted"


def install_http_middleware(
    app: Any,
    factory: PropagationFactory,
    current_trace_context: CurrentTraceContext,
) -> None:
    """
    Attach an HTTP middleware that makes the incoming trace context current.

    - Extracts trace identity and extra fields from request headers
    - Stores the extraction result on ``request.state.fieldprop_extracted``
    - Runs the request inside a scope of the extracted context, so
      ``current(name)`` works in handlers

    Without a traceparent header there is no trace context to scope, so
    ``current(name)`` returns None in handlers even when extra field headers
    (e.g. a pass-through ``x-amzn-trace-id``) were sent. Those values stay
    readable from the stored result: ``result.find_extra(Extra).get(name)``.
    """
    propagation = factory.create(string_key)

    @app.middleware("http")
    async def extra_field_middleware(request, call_next: Callable[[Any], Awaitable[Any]]):  # type: ignore
        result = extract_headers(request.headers, propagation)
        setattr(request.state, STATE_ATTRIBUTE, result)
        if result.context is None:
            logger.debug("No trace context in request headers; extra fields kept on request.state only")
            return await call_next(request)
        with current_trace_context.new_scope(result.context):
            return await call_next(request)

    return None
