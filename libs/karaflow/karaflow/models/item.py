"""Item model (workflow unit)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Item:
    id: str
    title: str | None = None

    def __post_init__(self) -> None:
        if not str(self.id or "").strip():
            raise ValueError("item id must be non-empty")
