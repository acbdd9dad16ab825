"""Tracks the active TraceContext - stored in the OpenTelemetry context."""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from opentelemetry import context as context_api

from fieldprop.tracer.trace_context import TraceContext


class CurrentTraceContext:
    """
    Resolver for "the trace context active on this execution unit".

    The value lives in the OpenTelemetry context, so it follows the same
    rules as the active span: it is per thread and per asyncio task, and
    scopes nest. Each instance uses its own context key, which keeps
    separate instances (e.g. one per test) from seeing each other's scopes.
    """

    def __init__(self, name: str = "fieldprop-trace-context") -> None:
        self._key = context_api.create_key(name)

    def get(self, otel_context: Optional[context_api.Context] = None) -> Optional[TraceContext]:
        """
        Return the active trace context, if any.

        Args:
            otel_context: OpenTelemetry context to read instead of the current one
        """
        return context_api.get_value(self._key, context=otel_context)

    @contextmanager
    def new_scope(self, context: Optional[TraceContext]) -> Iterator[Optional[TraceContext]]:
        """
        Make ``context`` current until the block exits.

        Passing None clears the active context for the block. The previous
        value is restored on exit.
        """
        token = context_api.attach(context_api.set_value(self._key, context))
        try:
            yield context
        finally:
            context_api.detach(token)

    def wrap(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """
        Bind ``fn`` to the OpenTelemetry context active at wrap time.

        Threads do not inherit context, so work handed to an executor should
        be wrapped first.
        """
        captured = context_api.get_current()

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            token = context_api.attach(captured)
            try:
                return fn(*args, **kwargs)
            finally:
                context_api.detach(token)

        return wrapper
