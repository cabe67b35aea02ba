"""Utility helpers."""

from karaflow.utils.ffmpeg import replace_audio_track, resolve_ffmpeg_bin
from karaflow.utils.logging_setup import setup_logging
from karaflow.utils.subprocess import RunResult, run_subprocess

__all__ = [
    "RunResult",
    "replace_audio_track",
    "resolve_ffmpeg_bin",
    "run_subprocess",
    "setup_logging",
]
