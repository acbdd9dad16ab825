"""HTTP server helpers for extracting context from request headers."""

from __future__ import annotations

from typing import Mapping

from fieldprop.propagation.base import Propagation
from fieldprop.tracer.trace_context import TraceContextOrSamplingFlags


def extract_headers(headers: Mapping[str, str], propagation: Propagation) -> TraceContextOrSamplingFlags:
    """
    Extract trace context and extra fields from request headers.

    Header names are matched case-insensitively.
    """
    lowered = {str(k).lower(): v for k, v in headers.items()}
    return propagation.extractor(dict.get).extract(lowered)
