"""Remote job models.

Wire payloads use the backend's camelCase keys (`audioUrl`, `alignmentsUrl`, ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class JobState(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {JobState.COMPLETED, JobState.FAILED}


def _url(result: dict[str, Any] | None, key: str) -> str | None:
    if not isinstance(result, dict):
        return None
    value = result.get(key)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


@dataclass
class Job:
    id: str
    queue: str
    state: JobState = JobState.WAITING
    progress: int | None = None
    result: dict[str, Any] | None = None
    error: str | None = None

    @property
    def alignments_url(self) -> str | None:
        return _url(self.result, "alignmentsUrl")

    @property
    def vocals_url(self) -> str | None:
        return _url(self.result, "vocalsUrl")

    @property
    def instruments_url(self) -> str | None:
        return _url(self.result, "instrumentsUrl")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "queue": self.queue,
            "state": self.state.value,
            "progress": self.progress,
            "result": dict(self.result) if isinstance(self.result, dict) else None,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, queue: str | None = None) -> "Job":
        raw_state = str(data.get("state") or JobState.WAITING.value).strip().lower()
        try:
            state = JobState(raw_state)
        except ValueError:
            state = JobState.ACTIVE
        progress = data.get("progress")
        result = data.get("result")
        error = data.get("error") or data.get("failedReason")
        return cls(
            id=str(data.get("id", "")),
            queue=str(queue or data.get("queue") or ""),
            state=state,
            progress=int(progress) if isinstance(progress, (int, float)) else None,
            result=dict(result) if isinstance(result, dict) else None,
            error=str(error) if error else None,
        )
