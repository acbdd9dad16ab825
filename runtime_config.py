"""Runtime configuration state management."""

from typing import Any, Optional

# Global runtime configuration state
_config = {
    "current_trace_context": None,
    "propagation_factory": None,
    "debug": False,
}


def set_current_trace_context(value: Optional[Any]) -> None:
    _config["current_trace_context"] = value


def get_current_trace_context() -> Optional[Any]:
    return _config["current_trace_context"]


def set_propagation_factory(value: Optional[Any]) -> None:
    _config["propagation_factory"] = value


def get_propagation_factory() -> Optional[Any]:
    return _config["propagation_factory"]


def set_debug(value: bool) -> None:
    _config["debug"] = value


def get_debug() -> bool:
    return _config["debug"]


def reset() -> None:
    _config["current_trace_context"] = None
    _config["propagation_factory"] = None
    _config["debug"] = False
