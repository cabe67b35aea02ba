"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from karaflow.exceptions import ConfigurationError

_ENV_FILES = (".env", "../.env", "../../.env")

_REPO_ROOT = Path(__file__).resolve().parents[3]


def _resolve_repo_path(value: str) -> str:
    raw = str(value or "").strip()
    if not raw:
        return raw
    p = Path(raw)
    if p.is_absolute():
        return str(p)
    return str((_REPO_ROOT / p).resolve())


class QueueConfig(BaseSettings):
    """Remote job queue configuration."""

    model_config = SettingsConfigDict(
        env_prefix="QUEUE_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: str = "http"  # "http" | "redis"
    base_url: str = "http://localhost:8080/api/v1"
    api_key: str = ""
    poll_interval_s: float = Field(default=1.0, ge=0)
    wait_timeout_s: float | None = Field(
        default=None,
        gt=0,
        description="Give up waiting for a job after this many seconds (None waits forever).",
    )
    request_timeout_s: float = Field(default=30.0, gt=0)
    key_prefix: str = "karaflow"


class TransferConfig(BaseSettings):
    """Transient storage used to hand payloads to the queue backend."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSFER_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: str = "s3"  # "s3" | "http"
    base_url: str = "http://localhost:8080/api/v1"
    api_key: str = ""
    request_timeout_s: float = Field(default=300.0, gt=0)
    upload_prefix: str = "uploads"
    presign_expires_s: int = Field(default=24 * 3600, ge=1)


class FetchRetryConfig(BaseSettings):
    """Retry policy for collecting job results."""

    model_config = SettingsConfigDict(
        env_prefix="FETCH_RETRY_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_attempts: int = Field(default=5, ge=1)
    wait_min_s: float = Field(default=1.0, ge=0)
    wait_max_s: float = Field(default=10.0, ge=0)
    multiplier: float = Field(default=1.0, ge=0)

    @model_validator(mode="after")
    def _validate_window(self) -> "FetchRetryConfig":
        if float(self.wait_max_s) < float(self.wait_min_s):
            raise ConfigurationError("FETCH_RETRY_WAIT_MAX_S must be >= FETCH_RETRY_WAIT_MIN_S")
        return self


class LibraryConfig(BaseSettings):
    """Local content library configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LIBRARY_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    root_dir: str = "./data/library"
    ffmpeg_bin: str = "ffmpeg"
    ffmpeg_timeout_s: float | None = Field(default=600.0, gt=0)

    @model_validator(mode="after")
    def _resolve_paths(self) -> "LibraryConfig":
        self.root_dir = _resolve_repo_path(self.root_dir)
        return self


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    file: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    data_dir: str = "./data"
    log_dir: str = "./logs"

    # Redis
    redis_url: str = "redis://localhost:6379"
    redis_task_ttl_days: int = Field(default=7, ge=1)

    # S3/MinIO
    s3_endpoint: str = "http://localhost:9000"
    s3_access_key: str = "minioadmin"
    s3_secret_key: str = "minioadmin"
    s3_bucket_name: str = "karaflow"

    queue: QueueConfig = QueueConfig()
    transfer: TransferConfig = TransferConfig()
    fetch_retry: FetchRetryConfig = FetchRetryConfig()
    library: LibraryConfig = LibraryConfig()

    # Logging
    logging: LoggingSettings = LoggingSettings()

    def model_post_init(self, __context: Any) -> None:
        def _abs_dir(p: str) -> str:
            out = Path(_resolve_repo_path(p))
            out.mkdir(parents=True, exist_ok=True)
            return str(out)

        self.data_dir = _abs_dir(self.data_dir)
        self.log_dir = _abs_dir(self.log_dir)

    @property
    def redis_task_ttl_s(self) -> int:
        return int(self.redis_task_ttl_days) * 24 * 3600
