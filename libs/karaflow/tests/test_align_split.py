from __future__ import annotations

import pytest

from karaflow.exceptions import ProcessingError, TransferError
from karaflow.models.item import Item
from karaflow.models.modes import CaptionMode, FileFormat, MediaMode
from karaflow.models.outcome import OutcomeStatus
from karaflow.pipeline.jobs import alignment_params


def test_alignment_params_use_backend_keys() -> None:
    params = alignment_params("https://a", "es", transcript_url="https://t", mode=CaptionMode.LINE)
    assert params == {
        "audioUrl": "https://a",
        "transcriptUrl": "https://t",
        "options": {"lang": "es", "mode": "line"},
    }
    params = alignment_params("https://a", "es", alignments_url="https://l")
    assert params == {"audioUrl": "https://a", "alignmentsUrl": "https://l", "options": {"lang": "es"}}


@pytest.mark.asyncio
async def test_align_persists_fetched_alignments(harness_factory) -> None:
    h = harness_factory()
    item = Item(id="abc123")

    outcome = await h.orchestrator.align(item, "https://audio", "https://lyrics", "en", CaptionMode.WORD)

    assert outcome.status == OutcomeStatus.PERSISTED
    assert outcome.modes == (CaptionMode.WORD,)
    [job] = h.queue.enqueued
    assert job.queue == "align_en"
    assert job.params["audioUrl"] == "https://audio"
    assert job.params["transcriptUrl"] == "https://lyrics"
    assert job.params["options"] == {"lang": "en", "mode": "word"}
    assert (CaptionMode.WORD, FileFormat.JSON) in h.library.saved


@pytest.mark.asyncio
async def test_align_without_result_is_tolerated(harness_factory) -> None:
    h = harness_factory(result_for=lambda queue, params: {})
    outcome = await h.orchestrator.align(Item(id="abc123"), "https://a", "https://t", "es", CaptionMode.LINE)

    assert outcome.status == OutcomeStatus.FAILED
    assert isinstance(outcome.error, ProcessingError)
    assert outcome.reason == "Sync failed"
    assert h.library.saved == {}
    assert h.transfer.fetches == []


@pytest.mark.asyncio
async def test_align_retries_result_download(harness_factory) -> None:
    url = "https://results.test/align-line.json"
    h = harness_factory(transient_failures={url: 2}, max_attempts=3)
    outcome = await h.orchestrator.align(Item(id="abc123"), "https://a", "https://t", "es", CaptionMode.LINE)

    assert outcome.is_persisted
    assert h.transfer.fetches == [url, url, url]


@pytest.mark.asyncio
async def test_align_download_failure_after_retries_propagates(harness_factory) -> None:
    url = "https://results.test/align-line.json"
    h = harness_factory(transient_failures={url: 5}, max_attempts=3)
    with pytest.raises(TransferError):
        await h.orchestrator.align(Item(id="abc123"), "https://a", "https://t", "es", CaptionMode.LINE)
    assert h.library.saved == {}


@pytest.mark.asyncio
async def test_split_persists_instruments_then_vocals(harness_factory) -> None:
    h = harness_factory()
    job = await h.orchestrator.split(Item(id="abc123"), "https://audio", h.on_status)

    assert job.vocals_url == "https://results.test/vocals.m4a"
    [enqueued] = h.queue.enqueued
    assert enqueued.queue == "split"
    assert enqueued.params == {"audioUrl": "https://audio"}
    saves = [c for c in h.calls if c[0] == "save_file"]
    assert saves == [("save_file", "instruments", "m4a"), ("save_file", "vocals", "m4a")]
    assert h.library.saved[(MediaMode.VOCALS, FileFormat.M4A)] == b"payload:https://results.test/vocals.m4a"
    assert "Downloading files" in h.statuses


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "result",
    [
        None,
        {},
        {"vocalsUrl": "https://results.test/vocals.m4a"},
        {"instrumentsUrl": "https://results.test/instruments.m4a", "vocalsUrl": ""},
    ],
)
async def test_split_without_both_tracks_is_fatal(harness_factory, result) -> None:
    h = harness_factory(result_for=lambda queue, params: result)
    with pytest.raises(ProcessingError, match="Processing failed"):
        await h.orchestrator.split(Item(id="abc123"), "https://audio")
    assert h.library.saved == {}
    assert h.transfer.fetches == []
