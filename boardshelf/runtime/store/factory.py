"""Build the configured key-value store backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

from boardshelf.runtime.store.local import LocalKeyValueStore
from boardshelf.runtime.store.memory import MemoryKeyValueStore

if TYPE_CHECKING:
    from boardshelf.runtime.settings import BoardshelfSettings
    from boardshelf.runtime.store.base import KeyValueStore


def create_store(settings: BoardshelfSettings) -> KeyValueStore:
    """Create the key-value store backend selected by ``kv_store``.

    Raises ``ValueError`` when the selected remote backend is missing its
    connection settings.
    """
    if settings.kv_store == "memory":
        return MemoryKeyValueStore()

    if settings.kv_store == "redis":
        if not settings.redis_url:
            msg = "BOARDSHELF_REDIS_URL is required when kv_store is 'redis'"
            raise ValueError(msg)
        from boardshelf.runtime.store.redis_store import RedisKeyValueStore

        return RedisKeyValueStore.from_url(settings.redis_url, prefix=settings.data_prefix)

    if settings.kv_store == "s3":
        missing = [
            name
            for name, value in (
                ("BOARDSHELF_S3_ENDPOINT", settings.s3_endpoint),
                ("BOARDSHELF_S3_BUCKET", settings.s3_bucket),
                ("BOARDSHELF_S3_ACCESS_KEY", settings.s3_access_key),
                ("BOARDSHELF_S3_SECRET_KEY", settings.s3_secret_key),
            )
            if not value
        ]
        if missing:
            msg = f"S3 store requires {', '.join(missing)}"
            raise ValueError(msg)
        from boardshelf.runtime.store.s3 import S3KeyValueStore

        return S3KeyValueStore(
            bucket=settings.s3_bucket,  # type: ignore[arg-type]
            endpoint_url=settings.s3_endpoint,  # type: ignore[arg-type]
            access_key=settings.s3_access_key,  # type: ignore[arg-type]
            secret_key=settings.s3_secret_key.get_secret_value(),  # type: ignore[union-attr]
            prefix=settings.data_prefix,
            region=settings.s3_region,
            path_style=settings.s3_path_style,
        )

    return LocalKeyValueStore(settings.data_root, prefix=settings.data_prefix)
