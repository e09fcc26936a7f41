"""
Per-cycle logging context.

The scheduler enters cycle_context() around each cycle; log formatters read
get_cycle_id() to tag records emitted by the sampler and the router client.
"""

from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar

cycle_id_var: ContextVar[int | None] = ContextVar("cycle_id", default=None)


@contextmanager
def cycle_context(cycle_id: int) -> Generator[int, None, None]:
    """Context manager scoping a sampling cycle number."""
    token = cycle_id_var.set(cycle_id)
    try:
        yield cycle_id
    finally:
        cycle_id_var.reset(token)


def get_cycle_id() -> int | None:
    return cycle_id_var.get()
