"""Karaflow exception hierarchy."""

from __future__ import annotations

from karaflow.error_codes import ErrorCode


class KaraflowError(Exception):
    """Base error for Karaflow."""

    error_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, *, error_code: ErrorCode | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = ErrorCode(error_code)


class ConfigurationError(KaraflowError):
    """Raised when configuration or inputs are invalid."""


class InputError(KaraflowError):
    """Raised when a workflow precondition is not met."""

    error_code = ErrorCode.INPUT_MISSING


class ProcessingError(KaraflowError):
    """Raised when a remote job finished without a usable result."""

    error_code = ErrorCode.PROCESSING_FAILED


class SyncError(ProcessingError):
    """Raised when a re-sync job finished without a usable result."""

    error_code = ErrorCode.SYNC_FAILED


class TransferError(KaraflowError):
    """Raised when a payload cannot be uploaded or fetched."""

    error_code = ErrorCode.TRANSFER_FAILED

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(f"{message} (url={url})" if url else message)
        self.url = url


class TransientTransferError(TransferError):
    """Transport-level failure worth retrying."""


class QueueError(KaraflowError):
    """Raised when the queue backend fails or a job cannot be awaited."""

    error_code = ErrorCode.QUEUE_FAILED

    def __init__(self, queue: str, message: str, *, job_id: str | None = None) -> None:
        prefix = f"{queue}"
        if job_id:
            prefix = f"{prefix} (job_id={job_id})"
        super().__init__(f"{prefix}: {message}")
        self.queue = queue
        self.job_id = job_id


class StageExecutionError(KaraflowError):
    """Raised when a pipeline stage is run without the inputs it requires."""

    def __init__(self, stage: str, message: str, *, item_id: str | None = None) -> None:
        prefix = f"{stage}"
        if item_id:
            prefix = f"{prefix} (item_id={item_id})"
        super().__init__(f"{prefix}: {message}")
        self.stage = stage
        self.item_id = item_id
