"""S3 key-value store.

Stores each key as one object with optional namespace prefix::

    s3://{bucket}/{prefix}/kv/{quoted key}

When prefix is None, the path collapses to::

    s3://{bucket}/kv/{quoted key}

Uses ``anyio.to_thread.run_sync`` to run boto3 calls in the thread pool,
matching the same async pattern as LocalKeyValueStore.
"""

from __future__ import annotations

from functools import partial
from typing import Any
from urllib.parse import quote

import boto3
from anyio import to_thread
from botocore.config import Config

from boardshelf.runtime.store.base import ReadyGate


def _create_s3_client(
    endpoint_url: str,
    access_key: str,
    secret_key: str,
    region: str | None = None,
    path_style: bool = False,
) -> Any:
    """Create a boto3 S3 client.

    Args:
        endpoint_url: S3 endpoint URL.
        access_key: AWS access key ID.
        secret_key: AWS secret access key.
        region: AWS region name (optional, some endpoints require it).
        path_style: Use path-style addressing instead of virtual-hosted.
            Required by MinIO and some S3-compatible services.
    """
    config = Config(
        request_checksum_calculation="when_required",
        response_checksum_validation="when_required",
        s3={"addressing_style": "path" if path_style else "auto"},
    )

    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        region_name=region,
        config=config,
    )


class S3KeyValueStore:
    """S3 implementation of the KeyValueStore protocol."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        prefix: str | None = None,
        region: str | None = None,
        path_style: bool = False,
    ) -> None:
        self._bucket = bucket
        self._client = _create_s3_client(endpoint_url, access_key, secret_key, region=region, path_style=path_style)
        self._key_prefix = f"{prefix}/kv/" if prefix else "kv/"
        self._gate = ReadyGate()

    def _object_key(self, key: str) -> str:
        return f"{self._key_prefix}{quote(key, safe='')}"

    async def ensure_ready(self) -> None:
        await self._gate.open(partial(to_thread.run_sync, partial(self._client.head_bucket, Bucket=self._bucket)))

    # -- Read ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        await self.ensure_ready()
        return await to_thread.run_sync(partial(self._get_object_body, self._object_key(key)))

    def _get_object_body(self, key: str) -> str | None:
        """Get object and read body in the same thread.

        Reading the streaming body must happen in the same thread as
        get_object to avoid issues with chunked transfer encoding.
        """
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=key)
        except self._client.exceptions.NoSuchKey:
            return None
        return resp["Body"].read().decode("utf-8")

    # -- Write -----------------------------------------------------------------

    async def set(self, key: str, value: str) -> None:
        await self.ensure_ready()
        await to_thread.run_sync(
            partial(
                self._client.put_object,
                Bucket=self._bucket,
                Key=self._object_key(key),
                Body=value.encode("utf-8"),
                ContentType="application/json",
            )
        )

    async def delete(self, key: str) -> None:
        await self.ensure_ready()
        # S3 delete is idempotent -- no error if key doesn't exist.
        await to_thread.run_sync(partial(self._client.delete_object, Bucket=self._bucket, Key=self._object_key(key)))
