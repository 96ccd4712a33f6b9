"""Trace context linking outbound requests to indexed event records."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class TraceContext:
    """Identifiers of the current trace and the transaction inside it."""

    trace_id: str
    transaction_id: str


_current_trace: ContextVar[TraceContext | None] = ContextVar(
    "datora_trace_context",
    default=None,
)


def set_trace(ctx: TraceContext) -> Token[TraceContext | None]:
    """Set the ambient trace and return a reset token."""
    return _current_trace.set(ctx)


def reset_trace(token: Token[TraceContext | None]) -> None:
    """Reset the ambient trace using the token from set_trace()."""
    _current_trace.reset(token)


def current_trace() -> TraceContext | None:
    """Ambient trace for this thread/task, or None."""
    return _current_trace.get()


@contextmanager
def trace_scope(ctx: TraceContext) -> Iterator[TraceContext]:
    """Make ``ctx`` the ambient trace for the duration of the block."""
    token = set_trace(ctx)
    try:
        yield ctx
    finally:
        reset_trace(token)
