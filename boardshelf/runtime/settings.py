"""Service configuration loaded from BOARDSHELF_* environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class BoardshelfSettings(BaseSettings):
    """Boardshelf runtime settings.

    All fields are read from environment variables with the ``BOARDSHELF_``
    prefix.  For example, ``BOARDSHELF_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOARDSHELF_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Key-value store -------------------------------------------------------
    kv_store: Literal["memory", "local", "redis", "s3"] = "local"

    data_root: str = "./data"
    """Root directory for the local store."""

    data_prefix: str | None = None
    """Optional namespace prefix inserted into all keys / data paths.

    For the local store paths become ``{data_root}/{data_prefix}/kv/...``; for
    Redis and S3 the prefix is prepended to every key.
    """

    redis_url: str | None = None
    """Redis connection string (only when kv_store = "redis")."""

    # S3 (only when kv_store = "s3")
    s3_endpoint: str | None = None
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    s3_path_style: bool = False
    """Use path-style addressing (required by MinIO and some S3-compatible services)."""

    # -- Storage keys ----------------------------------------------------------
    workspace_key: str = "boardshelf:workspace"
    board_key_prefix: str = "boardshelf:board:"
    legacy_payload_key: str = "boardshelf:drawing"
    """Single-document key used before boards were introduced."""

    save_debounce_ms: int = 300
    """Debounce window for board payload writes."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000

    @property
    def save_debounce(self) -> float:
        """Debounce window in seconds."""
        return max(self.save_debounce_ms, 0) / 1000


def get_settings() -> BoardshelfSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to
    force a re-read after overriding env vars.
    """
    return _get_settings_cached()


def _get_settings_cached() -> BoardshelfSettings:
    """Inner function wrapped by lru_cache (allows type-safe cache_clear)."""
    return BoardshelfSettings()


# Apply lru_cache at runtime so the function is only called once.
from functools import lru_cache  # noqa: E402

_get_settings_cached = lru_cache(maxsize=1)(_get_settings_cached)
