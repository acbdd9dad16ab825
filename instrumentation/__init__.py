"""Instrumentation helpers for HTTP clients and servers."""

from fieldprop.instrumentation.http_client import inject_headers
from fieldprop.instrumentation.http_server import extract_headers
from fieldprop.instrumentation.fastapi import install_http_middleware

__all__ = [
    "inject_headers",
    "extract_headers",
    "install_http_middleware",
]
