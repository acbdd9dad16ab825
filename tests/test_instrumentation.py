"""Tests for HTTP client/server helpers and the FastAPI middleware."""

import asyncio
from types import SimpleNamespace

from fieldprop.instrumentation import extract_headers, inject_headers, install_http_middleware
from fieldprop.propagation import W3C_FACTORY, Extra, current, get, new_factory, set, string_key
from fieldprop.tracer import CurrentTraceContext, TraceContext

TRACE_ID = "0af7651916cd43dd8448eb211c80319c"
SPAN_ID = "b7ad6b7169203331"
UUID = "f4308d05-2228-4468-80f6-92a8377ba193"


class FakeApp:
    """Minimal stand-in for a FastAPI app's middleware registration."""

    def __init__(self):
        self.middlewares = []

    def middleware(self, kind):
        def register(fn):
            self.middlewares.append((kind, fn))
            return fn
        return register


class FakeRequest:
    def __init__(self, headers):
        self.headers = headers
        self.state = SimpleNamespace()


def _setup():
    factory = new_factory(W3C_FACTORY, "x-vcap-request-id")
    context = factory.decorate(TraceContext(trace_id=TRACE_ID, span_id=SPAN_ID))
    return factory, factory.create(string_key), context


def test_inject_headers_explicit_context():
    _, propagation, context = _setup()
    set(context, "x-vcap-request-id", UUID)

    headers = inject_headers({}, propagation, context=context)

    assert headers == {
        "x-vcap-request-id": UUID,
        "traceparent": f"00-{TRACE_ID}-{SPAN_ID}-01",
    }


def test_inject_headers_current_context():
    _, propagation, context = _setup()
    current_trace_context = CurrentTraceContext()
    set(context, "x-vcap-request-id", UUID)

    with current_trace_context.new_scope(context):
        headers = inject_headers({}, propagation, current_trace_context=current_trace_context)

    assert headers["x-vcap-request-id"] == UUID


def test_inject_headers_noop_without_context():
    _, propagation, _ = _setup()

    assert inject_headers({"accept": "*/*"}, propagation, current_trace_context=CurrentTraceContext()) == {
        "accept": "*/*"
    }


def test_extract_headers_case_insensitive():
    _, propagation, _ = _setup()
    headers = {
        "TraceParent": f"00-{TRACE_ID}-{SPAN_ID}-01",
        "X-Vcap-Request-Id": UUID,
    }

    result = extract_headers(headers, propagation)

    assert result.context.trace_id == TRACE_ID
    assert get(result.context, "x-vcap-request-id") == UUID


def test_middleware_scopes_extracted_context():
    factory, _, _ = _setup()
    current_trace_context = CurrentTraceContext()
    app = FakeApp()
    install_http_middleware(app, factory, current_trace_context)
    ((kind, middleware),) = app.middlewares
    seen = []

    async def call_next(request):
        seen.append(current("x-vcap-request-id", current_trace_context=current_trace_context))
        return "response"

    request = FakeRequest({"traceparent": f"00-{TRACE_ID}-{SPAN_ID}-01", "x-vcap-request-id": UUID})
    response = asyncio.run(middleware(request, call_next))

    assert kind == "http"
    assert response == "response"
    assert seen == [UUID]
    assert current_trace_context.get() is None


def test_middleware_keeps_fields_without_trace_context():
    """Extra fields sent without a traceparent are not current, but reach the handler."""
    factory, _, _ = _setup()
    current_trace_context = CurrentTraceContext()
    app = FakeApp()
    install_http_middleware(app, factory, current_trace_context)
    ((_, middleware),) = app.middlewares
    seen = []

    async def call_next(request):
        seen.append(current("x-vcap-request-id", current_trace_context=current_trace_context))
        extracted = request.state.fieldprop_extracted
        seen.append(extracted.find_extra(Extra).get("x-vcap-request-id"))
        return "response"

    request = FakeRequest({"X-Vcap-Request-Id": UUID})
    response = asyncio.run(middleware(request, call_next))

    assert response == "response"
    assert seen == [None, UUID]
    assert request.state.fieldprop_extracted.context is None
