"""Immutable trace identity plus opaque extensions."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional, Tuple, Type, TypeVar

T = TypeVar("T")


def _find(extra: Tuple[Any, ...], kind: Type[T]) -> Optional[T]:
    for item in extra:
        if isinstance(item, kind):
            return item
    return None


@dataclass(frozen=True)
class TraceContext:
    trace_id: str
    span_id: str
    parent_id: Optional[str] = None
    trace_flags: int = 1  # 1 = sampled, 0 = not sampled
    trace_state: Optional[str] = None
    extra: Tuple[Any, ...] = ()

    def is_valid(self) -> bool:
        return bool(self.trace_id and self.span_id)

    @property
    def sampled(self) -> bool:
        return bool(self.trace_flags & 1)

    def with_extra(self, extra) -> "TraceContext":
        """Return a copy carrying ``extra`` instead of the current extensions."""
        return replace(self, extra=tuple(extra))

    def find_extra(self, kind: Type[T]) -> Optional[T]:
        """Return the first extension that is an instance of ``kind``, if any."""
        return _find(self.extra, kind)


@dataclass(frozen=True)
class TraceContextOrSamplingFlags:
    """
    Result of extracting a carrier.

    Either a full trace context was present, or only a sampling decision
    (possibly none at all). Extensions added when no context exists are kept
    on the result itself so the caller can attach them to the next context.
    """

    context: Optional[TraceContext] = None
    sampled: Optional[bool] = None
    extra: Tuple[Any, ...] = ()

    def add_extra(self, item: Any) -> "TraceContextOrSamplingFlags":
        if self.context is not None:
            context = self.context.with_extra(self.context.extra + (item,))
            return replace(self, context=context)
        return replace(self, extra=self.extra + (item,))

    def find_extra(self, kind: Type[T]) -> Optional[T]:
        if self.context is not None:
            return self.context.find_extra(kind)
        return _find(self.extra, kind)


TraceContextOrSamplingFlags.EMPTY = TraceContextOrSamplingFlags()
