"""Workflow task processing handler."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from redis.asyncio import Redis

from karaflow.error_codes import ErrorCode
from karaflow.exceptions import InputError, KaraflowError
from karaflow.models.item import Item
from karaflow.models.modes import parse_mode
from karaflow.models.outcome import OutcomeStatus
from karaflow.models.status import StatusSink
from karaflow.pipeline import Orchestrator

logger = logging.getLogger("karaflow.worker")

TASK_STATUS_PROCESSING = "processing"
TASK_STATUS_COMPLETED = "completed"
TASK_STATUS_FAILED = "failed"


def task_key(task_id: str) -> str:
    return f"karaflow:task:{task_id}"


async def _update_task(redis: Redis, task_id: str, patch: dict[str, Any], ttl_s: int) -> None:
    fields = {k: "" if v is None else str(v) for k, v in patch.items()}
    fields["updated_at"] = datetime.now(tz=timezone.utc).isoformat()
    key = task_key(task_id)
    await redis.hset(key, mapping=fields)
    await redis.expire(key, ttl_s)


class _RedisStatusSink:
    """Status sink that mirrors phase labels into the task record.

    The sink is called synchronously from the workflow; writes are scheduled
    on the running loop and drained with `flush()`.
    """

    def __init__(self, redis: Redis, task_id: str, ttl_s: int) -> None:
        self._redis = redis
        self._task_id = task_id
        self._ttl_s = ttl_s
        self._pending: set[asyncio.Task[None]] = set()

    def __call__(self, message: str) -> None:
        logger.debug("task status (task_id=%s, message=%s)", self._task_id, message)
        task = asyncio.get_running_loop().create_task(
            _update_task(self._redis, self._task_id, {"status_message": message}, self._ttl_s)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        if not self._pending:
            return
        results = await asyncio.gather(*list(self._pending), return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.warning("status update failed (task_id=%s, error=%s)", self._task_id, result)


async def _run_workflow(
    orchestrator: Orchestrator, task: dict[str, Any], item: Item, sink: StatusSink
) -> dict[str, Any]:
    typ = str(task.get("type", "")).strip()
    match typ:
        case "generate":
            context = await orchestrator.generate(item, sink)
            captions = context.get("captions") or {}
            produced = sorted(m.value for m, o in captions.items() if o.status == OutcomeStatus.PERSISTED)
            return {"language": context.get("language"), "captions": ",".join(produced)}
        case "realign":
            try:
                mode = parse_mode(str(task.get("mode", "")))
            except ValueError as exc:
                raise InputError(str(exc)) from exc
            await orchestrator.realign(item, mode, sink)
            return {"captions": mode.value}
        case "alignline":
            await orchestrator.alignline(item, sink)
            return {"captions": "word"}
        case _:
            raise InputError(f"Unknown task type: {typ!r}")


async def process_task(task: dict[str, Any], redis: Redis, orchestrator: Orchestrator, *, ttl_s: int) -> None:
    task_id = str(task.get("id", "")).strip()
    item_id = str(task.get("item_id", "")).strip()
    if not task_id or not item_id:
        logger.warning("dropping malformed task: %s", task)
        return

    item = Item(id=item_id, title=str(task.get("title") or "").strip() or None)
    sink = _RedisStatusSink(redis, task_id, ttl_s)
    await _update_task(
        redis,
        task_id,
        {"status": TASK_STATUS_PROCESSING, "type": task.get("type"), "item_id": item_id, "error": None},
        ttl_s,
    )

    try:
        summary = await _run_workflow(orchestrator, task, item, sink)
    except KaraflowError as exc:
        logger.warning("task failed (task_id=%s, item_id=%s, error=%s)", task_id, item_id, exc)
        await sink.flush()
        await _update_task(
            redis,
            task_id,
            {"status": TASK_STATUS_FAILED, "error": str(exc), "error_code": exc.error_code.value},
            ttl_s,
        )
        return
    except Exception as exc:
        logger.exception("task crashed (task_id=%s, item_id=%s)", task_id, item_id)
        await sink.flush()
        await _update_task(
            redis,
            task_id,
            {"status": TASK_STATUS_FAILED, "error": str(exc), "error_code": ErrorCode.UNKNOWN.value},
            ttl_s,
        )
        return

    await sink.flush()
    await _update_task(redis, task_id, {"status": TASK_STATUS_COMPLETED, **summary}, ttl_s)
    logger.info("task completed (task_id=%s, item_id=%s)", task_id, item_id)
