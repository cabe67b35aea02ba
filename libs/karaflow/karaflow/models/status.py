"""Status sink type."""

from __future__ import annotations

from collections.abc import Callable

StatusSink = Callable[[str], None]


def noop_status(_message: str) -> None:
    return None
