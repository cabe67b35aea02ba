from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from karaflow.config import Settings
from karaflow.exceptions import TransientTransferError
from karaflow.library.base import ContentLibrary
from karaflow.models.item import Item
from karaflow.models.job import Job, JobState
from karaflow.models.modes import CaptionMode, FileFormat, MediaMode, ProcessingMode
from karaflow.pipeline.orchestrator import Orchestrator
from karaflow.providers.queue.base import QueueClient
from karaflow.providers.transfer.base import PayloadEncoding, TransferClient
from karaflow.services.fetcher import ResilientFetcher

RESULTS = "https://results.test"
ALIGNMENTS_JSON = json.dumps([{"start": 0.0, "end": 1.5, "text": "la la"}])


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        log_dir=str(tmp_path / "logs"),
    )


class FakeLibrary(ContentLibrary):
    def __init__(
        self,
        calls: list[tuple[Any, ...]],
        *,
        lyrics: str | None = "la la la",
        language: str | None = "es",
        line_alignments: list[Any] | None = None,
        vocals: bytes | None = b"vocals",
    ) -> None:
        self.calls = calls
        self.lyrics = lyrics
        self.language = language
        self.line_alignments = line_alignments
        self.vocals = vocals
        self.saved: dict[tuple[ProcessingMode, FileFormat], bytes | str] = {}
        self.language_requests: list[dict[str, Any]] = []

    async def init(self, item: Item) -> None:
        self.calls.append(("init", item.id))

    async def get_lyrics(self, item: Item, title: str | None = None) -> str | None:
        self.calls.append(("get_lyrics", title))
        return self.lyrics

    async def get_language(self, item: Item, text: str | None = None, force: bool = False) -> str | None:
        self.calls.append(("get_language",))
        self.language_requests.append({"text": text, "force": force})
        return self.language

    async def get_audio(self, item: Item, mode: MediaMode) -> bytes | None:
        self.calls.append(("get_audio", mode.value))
        if mode == MediaMode.VOCALS:
            return self.vocals
        return f"audio:{mode.value}".encode()

    async def get_video(self, item: Item, mode: MediaMode) -> bytes | None:
        self.calls.append(("get_video", mode.value))
        if mode != MediaMode.ORIGINAL and (mode, FileFormat.M4A) not in self.saved:
            raise AssertionError(f"{mode.value} video requested before its audio was saved")
        return f"video:{mode.value}".encode()

    async def get_info(self, item: Item) -> dict[str, Any]:
        self.calls.append(("get_info",))
        return {"title": item.title}

    async def get_alignments(self, item: Item, mode: CaptionMode) -> list[Any] | None:
        self.calls.append(("get_alignments", mode.value))
        return self.line_alignments if mode == CaptionMode.LINE else None

    async def save_file(self, item: Item, mode: ProcessingMode, fmt: FileFormat, payload: bytes | str) -> str:
        self.calls.append(("save_file", mode.value, fmt.value))
        self.saved[(mode, fmt)] = payload
        return f"mem://{item.id}/{mode.value}.{fmt.value}"

    def saved_modes(self) -> set[str]:
        return {mode.value for mode, _fmt in self.saved}


class FakeTransfer(TransferClient):
    """Upload returns sequential URLs; fetch serves deterministic result payloads."""

    def __init__(self, calls: list[tuple[Any, ...]], *, transient_failures: dict[str, int] | None = None) -> None:
        self.calls = calls
        self.uploads: list[bytes | str] = []
        self.fetches: list[str] = []
        self.transient_failures = dict(transient_failures or {})

    async def upload(self, payload: bytes | str) -> str:
        kind = "text" if isinstance(payload, str) else "bytes"
        self.calls.append(("upload", kind))
        self.uploads.append(payload)
        return f"https://transfer.test/{len(self.uploads)}"

    async def fetch(self, url: str, encoding: PayloadEncoding) -> bytes | str:
        self.calls.append(("fetch", url))
        self.fetches.append(url)
        remaining = self.transient_failures.get(url, 0)
        if remaining > 0:
            self.transient_failures[url] = remaining - 1
            raise TransientTransferError("connection reset", url=url)
        if encoding == PayloadEncoding.TEXT:
            return ALIGNMENTS_JSON
        return f"payload:{url}".encode()


def default_result(queue: str, params: dict[str, Any]) -> dict[str, Any] | None:
    if queue == "split":
        return {"instrumentsUrl": f"{RESULTS}/instruments.m4a", "vocalsUrl": f"{RESULTS}/vocals.m4a"}
    mode = (params.get("options") or {}).get("mode", "word")
    return {"alignmentsUrl": f"{RESULTS}/{queue}-{mode}.json"}


@dataclass
class Enqueued:
    queue: str
    job_id: str
    params: dict[str, Any]

    @property
    def mode(self) -> str | None:
        return (self.params.get("options") or {}).get("mode")


class FakeQueue(QueueClient):
    poll_interval_s = 0.0

    def __init__(
        self,
        calls: list[tuple[Any, ...]],
        result_for: Callable[[str, dict[str, Any]], dict[str, Any] | None] = default_result,
    ) -> None:
        self.calls = calls
        self.result_for = result_for
        self.enqueued: list[Enqueued] = []
        self._jobs: dict[str, Job] = {}

    async def enqueue(self, queue: str, params: dict[str, Any]) -> str:
        job_id = f"{queue}-{len(self.enqueued) + 1}"
        entry = Enqueued(queue=queue, job_id=job_id, params=params)
        self.enqueued.append(entry)
        self.calls.append(("enqueue", queue, entry.mode))
        result = self.result_for(queue, params)
        state = JobState.COMPLETED if result is not None else JobState.FAILED
        self._jobs[job_id] = Job(id=job_id, queue=queue, state=state, result=result)
        return job_id

    async def get_job(self, queue: str, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def by_queue(self, queue: str) -> list[Enqueued]:
        return [e for e in self.enqueued if e.queue == queue]


@dataclass
class Harness:
    calls: list[tuple[Any, ...]]
    library: FakeLibrary
    transfer: FakeTransfer
    queue: FakeQueue
    orchestrator: Orchestrator
    statuses: list[str] = field(default_factory=list)

    def on_status(self, message: str) -> None:
        self.statuses.append(message)

    def index(self, call: tuple[Any, ...]) -> int:
        return self.calls.index(call)


def make_harness(
    *,
    library_kwargs: dict[str, Any] | None = None,
    result_for: Callable[[str, dict[str, Any]], dict[str, Any] | None] = default_result,
    transient_failures: dict[str, int] | None = None,
    max_attempts: int = 3,
) -> Harness:
    calls: list[tuple[Any, ...]] = []
    library = FakeLibrary(calls, **(library_kwargs or {}))
    transfer = FakeTransfer(calls, transient_failures=transient_failures)
    queue = FakeQueue(calls, result_for=result_for)
    fetcher = ResilientFetcher(transfer, max_attempts=max_attempts, wait_min_s=0, wait_max_s=0)
    orchestrator = Orchestrator(library=library, transfer=transfer, queue=queue, fetcher=fetcher)
    return Harness(calls=calls, library=library, transfer=transfer, queue=queue, orchestrator=orchestrator)


@pytest.fixture()
def harness_factory() -> Callable[..., Harness]:
    return make_harness
