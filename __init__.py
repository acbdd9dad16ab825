"""fieldprop: propagate request-scoped extra fields alongside the trace identity."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from fieldprop import runtime_config
from fieldprop.config import load_config
from fieldprop.errors import ConfigError, FieldPropError, ValidationError
from fieldprop.propagation import (
    W3C_FACTORY,
    Extra,
    ExtraFieldPropagation,
    PropagationFactory,
    current,
    get,
    new_factory,
    set,
    string_key,
)
from fieldprop.tracer import CurrentTraceContext, TraceContext, TraceContextOrSamplingFlags

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

_init_lock = threading.Lock()


def init(
    extra_fields: Optional[Iterable[str]] = None,
    delegate: Optional[PropagationFactory] = None,
    config_file: Optional[str] = None,
    debug: Optional[bool] = None,
) -> ExtraFieldPropagation.Factory:
    """
    Configure extra field propagation for this process.

    Builds a propagation factory wrapping ``delegate`` (W3C trace context by
    default), creates the active-context resolver used by ``current()`` and
    registers both in the runtime config.

    Args:
        extra_fields: Field names to propagate; falls back to the config file
            and the FIELDPROP_EXTRA_FIELDS environment variable
        delegate: Underlying propagation factory
        config_file: Explicit path to a fieldprop.toml file
        debug: Enable debug logging for the fieldprop logger

    Returns:
        The registered propagation factory. Calling init() again before
        reset() returns the existing factory.
    """
    with _init_lock:
        existing = runtime_config.get_propagation_factory()
        if existing is not None:
            logger.warning("fieldprop.init() called more than once; call reset() first to reconfigure")
            return existing

        settings = load_config(config_file)
        names = list(extra_fields) if extra_fields is not None else settings.extra_fields
        if not names:
            raise ConfigError(
                "No extra fields configured",
                {"hint": "pass extra_fields or set propagation.extra_fields"},
            )
        factory = new_factory(delegate or W3C_FACTORY, names)

        if debug is None:
            debug = settings.debug
        runtime_config.set_debug(debug)
        if debug:
            logging.getLogger("fieldprop").setLevel(logging.DEBUG)

        runtime_config.set_propagation_factory(factory)
        runtime_config.set_current_trace_context(CurrentTraceContext())
        logger.debug(f"fieldprop initialized with extra fields: {', '.join(factory.names)}")
        return factory


def reset() -> None:
    """Clear the registered factory and resolver so init() can run again."""
    with _init_lock:
        runtime_config.reset()


def get_current_trace_context() -> Optional[CurrentTraceContext]:
    """Return the resolver registered by init(), if any."""
    return runtime_config.get_current_trace_context()


__all__ = [
    "__version__",
    "init",
    "reset",
    "get_current_trace_context",
    "new_factory",
    "current",
    "get",
    "set",
    "string_key",
    "Extra",
    "ExtraFieldPropagation",
    "PropagationFactory",
    "W3C_FACTORY",
    "CurrentTraceContext",
    "TraceContext",
    "TraceContextOrSamplingFlags",
    "FieldPropError",
    "ConfigError",
    "ValidationError",
]
