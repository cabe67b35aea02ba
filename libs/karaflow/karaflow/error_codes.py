"""Canonical error codes surfaced to callers."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"

    INPUT_MISSING = "INPUT_MISSING"
    PROCESSING_FAILED = "PROCESSING_FAILED"
    SYNC_FAILED = "SYNC_FAILED"
    TRANSFER_FAILED = "TRANSFER_FAILED"
    QUEUE_FAILED = "QUEUE_FAILED"
