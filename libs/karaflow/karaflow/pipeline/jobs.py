"""Remote job sub-workflows: alignment and source separation.

The two differ in how they treat a job that finished without a
result: alignment returns a tolerated `FAILED` outcome so sibling branches keep
going, separation raises because everything downstream needs its output.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from karaflow.exceptions import ProcessingError
from karaflow.models.item import Item
from karaflow.models.job import Job
from karaflow.models.modes import CaptionMode, FileFormat, MediaMode
from karaflow.models.outcome import StageOutcome
from karaflow.models.status import StatusSink, noop_status
from karaflow.pipeline.context import Services
from karaflow.pipeline.routing import QueueName, route_queue

logger = logging.getLogger(__name__)


def alignment_params(
    audio_url: str,
    lang: str | None,
    *,
    transcript_url: str | None = None,
    alignments_url: str | None = None,
    mode: CaptionMode | None = None,
) -> dict[str, Any]:
    params: dict[str, Any] = {"audioUrl": audio_url}
    if transcript_url is not None:
        params["transcriptUrl"] = transcript_url
    if alignments_url is not None:
        params["alignmentsUrl"] = alignments_url
    options: dict[str, Any] = {"lang": lang}
    if mode is not None:
        options["mode"] = mode.value
    params["options"] = options
    return params


async def submit_and_wait(
    services: Services,
    queue: QueueName,
    params: dict[str, Any],
    on_status: StatusSink | None = None,
) -> Job:
    job_id = await services.queue.enqueue(queue.value, params)
    return await services.queue.wait(queue.value, job_id, on_status or noop_status)


async def align(
    services: Services,
    item: Item,
    audio_url: str,
    transcript_url: str,
    lang: str | None,
    mode: CaptionMode,
    on_status: StatusSink | None = None,
) -> StageOutcome:
    """Align a transcript against audio and persist captions for `mode`."""
    queue = route_queue(lang, mode)
    params = alignment_params(audio_url, lang, transcript_url=transcript_url, mode=mode)
    job = await submit_and_wait(services, queue, params, on_status)

    url = job.alignments_url
    if not url:
        error = ProcessingError("Sync failed")
        logger.warning(
            "alignment returned no result, nothing persisted (item_id=%s, queue=%s, job_id=%s, mode=%s, job_error=%s)",
            item.id,
            queue.value,
            job.id,
            mode.value,
            job.error,
        )
        return StageOutcome.failed(error)

    alignments = await services.fetcher.fetch_text(url)
    await services.library.save_file(item, mode, FileFormat.JSON, alignments)
    return StageOutcome.persisted(mode)


async def split(
    services: Services,
    item: Item,
    audio_url: str,
    on_status: StatusSink | None = None,
) -> Job:
    """Separate vocals from instruments, persist both tracks, return the job."""
    notify = on_status or noop_status
    queue = route_queue(None, MediaMode.VOCALS)
    job = await submit_and_wait(services, queue, {"audioUrl": audio_url}, notify)

    instruments_url = job.instruments_url
    vocals_url = job.vocals_url
    if not instruments_url or not vocals_url:
        logger.error(
            "separation returned no result (item_id=%s, job_id=%s, job_error=%s)", item.id, job.id, job.error
        )
        raise ProcessingError("Processing failed")

    notify("Downloading files")
    vocals, instruments = await asyncio.gather(
        services.fetcher.fetch_bytes(vocals_url),
        services.fetcher.fetch_bytes(instruments_url),
    )
    await services.library.save_file(item, MediaMode.INSTRUMENTS, FileFormat.M4A, instruments)
    await services.library.save_file(item, MediaMode.VOCALS, FileFormat.M4A, vocals)
    return job
