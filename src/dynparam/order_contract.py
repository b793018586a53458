from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Dict, Iterable, Iterator, List, TypeVar


T = TypeVar("T")
SortEvent = Dict[str, object]

_SORT_EVENTS: ContextVar[List[SortEvent] | None] = ContextVar(
    "dynparam_order_telemetry",
    default=None,
)


def sort_once(
    values: Iterable[T],
    *,
    source: str,
    key: Callable[[T], Any] | None = None,
    reverse: bool = False,
) -> list[T]:
    """Sort ``values`` at a named ordering surface.

    ``source`` names the surface. Inside ``order_telemetry()`` each call is
    recorded with its item count and whether the input was already sorted.
    """
    items = list(values)
    ordered = sorted(items, key=key, reverse=reverse)  # type: ignore[arg-type]
    telemetry = _SORT_EVENTS.get()
    if telemetry is not None:
        telemetry.append(
            {
                "source": source,
                "count": len(items),
                "already_sorted": ordered == items,
            }
        )
    return ordered


@contextmanager
def order_telemetry() -> Iterator[List[SortEvent]]:
    events: List[SortEvent] = []
    token = _SORT_EVENTS.set(events)
    try:
        yield events
    finally:
        _SORT_EVENTS.reset(token)
