"""Run external tools (ffmpeg) off the event loop.

Blocking `subprocess.run()` goes through `asyncio.to_thread()`; asyncio's own
subprocess transport needs a child watcher that some loops lack.
"""

from __future__ import annotations

import asyncio
import subprocess
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: bytes
    stderr: bytes


async def run_subprocess(args: Sequence[str], *, timeout_s: float | None = None) -> RunResult:
    """Run `args` to completion, capturing both streams.

    A non-zero exit is reported through `returncode`; exceeding `timeout_s`
    raises `subprocess.TimeoutExpired`.
    """
    cp = await asyncio.to_thread(
        subprocess.run,
        list(args),
        capture_output=True,
        check=False,
        timeout=timeout_s,
    )
    return RunResult(returncode=int(cp.returncode), stdout=cp.stdout or b"", stderr=cp.stderr or b"")
