"""FFmpeg helpers used to derive karaoke videos."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from karaflow.utils.subprocess import run_subprocess

logger = logging.getLogger(__name__)


def resolve_ffmpeg_bin(ffmpeg_bin: str = "ffmpeg") -> str:
    ffmpeg_bin = (ffmpeg_bin or "ffmpeg").strip()

    if Path(ffmpeg_bin).exists():
        return ffmpeg_bin

    found = shutil.which(ffmpeg_bin)
    if found:
        return found

    logger.warning("ffmpeg binary not found on PATH; using %r as-is", ffmpeg_bin)
    return ffmpeg_bin


async def replace_audio_track(
    video_path: str | Path,
    audio_path: str | Path,
    output_path: str | Path,
    *,
    ffmpeg_bin: str = "ffmpeg",
    timeout_s: float | None = None,
) -> Path:
    """Copy the video stream of `video_path` and mux in `audio_path` as its only audio.

    ffmpeg writes to a sibling `.part` file that only replaces `output_path`
    once the mux succeeded.
    """
    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    part = out.with_name(f"{out.stem}.part{out.suffix}")
    args = [
        resolve_ffmpeg_bin(ffmpeg_bin),
        "-y",
        "-i",
        str(video_path),
        "-i",
        str(audio_path),
        "-map",
        "0:v:0",
        "-map",
        "1:a:0",
        "-c:v",
        "copy",
        "-c:a",
        "copy",
        "-shortest",
        str(part),
    ]
    try:
        result = await run_subprocess(args, timeout_s=timeout_s)
        if result.returncode != 0:
            raise RuntimeError(
                "ffmpeg failed "
                f"(code={result.returncode}).\n"
                f"cmd: {' '.join(args)}\n"
                f"stderr: {result.stderr.decode(errors='ignore')}"
            )
        os.replace(part, out)
    finally:
        part.unlink(missing_ok=True)
    return out
