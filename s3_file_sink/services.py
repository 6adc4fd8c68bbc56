from __future__ import annotations
"""File-system style access to a prefix of an S3 bucket."""
import asyncio
import hashlib
import logging
from typing import Any, AsyncIterator, Callable, Optional, Union

import boto3
from botocore.client import Config

from .deleter import DELETE_BATCH_SIZE, BatchDeleter
from .errors import UnsupportedOperationError
from .find import Finder, Pattern, create_test
from .listing import MAX_PAGE_SIZE, ListingAggregator
from .models import FileNode
from .nodes import DEFAULT_ACCESS_URL_DOMAIN, NodeSynthesizer
from .paths import SEPARATOR, is_allowed_path, resolve_key
from .profiles import ConnectionProfile
from .resolver import DirectoryResolver
from .settings import SinkSettings

LOGGER = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024

WriteData = Union[str, bytes, bytearray, memoryview]


class S3FileSink:
    """Reads, writes and traverses objects below ``prefix`` as if they were files.

    All operations are coroutines. Blocking boto3 calls run in a thread so
    that concurrent operations do not stall the event loop. Nothing besides the
    configuration is shared between calls.
    """

    create_test = staticmethod(create_test)

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        *,
        client=None,
        client_factory: Callable[..., object] | None = None,
        connection: dict[str, Any] | None = None,
        access_url_domain: str = DEFAULT_ACCESS_URL_DOMAIN,
        page_size: int = MAX_PAGE_SIZE,
        delete_batch_size: int = DELETE_BATCH_SIZE,
    ):
        self._bucket = bucket
        self._prefix = prefix
        if client is None:
            client = self._create_client(client_factory or boto3.client, connection or {})
        self._client = client

        self._nodes = NodeSynthesizer(bucket, prefix, access_url_domain)
        self._listing = ListingAggregator(client, bucket, page_size)
        self._resolver = DirectoryResolver(self._listing, self._nodes, prefix)
        self._deleter = BatchDeleter(client, bucket, self._listing, prefix, delete_batch_size)
        self._finder = Finder(self._listing, self._nodes, prefix)

    @classmethod
    def from_settings(
        cls,
        settings: SinkSettings,
        profile: ConnectionProfile | None = None,
        *,
        client_factory: Callable[..., object] | None = None,
    ) -> "S3FileSink":
        if profile is not None:
            connection = profile.client_kwargs()
        else:
            connection = {}
            if settings.endpoint_url:
                connection["endpoint_url"] = settings.endpoint_url
        if settings.region_name and "region_name" not in connection:
            connection["region_name"] = settings.region_name
        return cls(
            settings.bucket,
            settings.prefix,
            client_factory=client_factory,
            connection=connection,
            access_url_domain=settings.access_url_domain,
            page_size=settings.page_size,
            delete_batch_size=settings.delete_batch_size,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def prefix(self) -> str:
        return self._prefix

    def is_allowed_path(self, path: str) -> bool:
        return is_allowed_path(path)

    def access_url(self, path: str) -> str:
        return self._nodes.access_url(resolve_key(self._prefix, path))

    async def read(self, path: str) -> bytes:
        """Return the full contents of the object at ``path``.

        Raises:
            PathNotAllowedError: when the path contains ``..``.
            ClientError: ``NoSuchKey`` when the object does not exist.
        """

        combined = resolve_key(self._prefix, path)
        response = await asyncio.to_thread(self._client.get_object, Bucket=self._bucket, Key=combined)
        body = response["Body"]
        try:
            return await asyncio.to_thread(body.read)
        finally:
            body.close()

    def read_sync(self, path: str) -> bytes:
        raise UnsupportedOperationError("This sink must read data asynchronously")

    def read_stream(self, path: str, chunk_size: int = READ_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Return an async iterator over the object's bytes in chunks."""

        combined = resolve_key(self._prefix, path)
        return self._iter_body(combined, chunk_size)

    async def create_hash(self, path: str, algorithm: str = "sha512") -> str:
        digest = hashlib.new(algorithm)
        async for chunk in self.read_stream(path):
            digest.update(chunk)
        return digest.hexdigest()

    async def write(
        self,
        path: str,
        data: WriteData,
        *,
        offset: Optional[int] = None,
        length: Optional[int] = None,
        position: Optional[int] = None,
    ) -> dict[str, Any]:
        """Store ``data`` at ``path``, replacing any existing object.

        ``offset`` and ``length`` select a slice of ``data`` before upload.
        Writing at a ``position`` within an existing object is not supported.
        """

        combined = resolve_key(self._prefix, path)
        if position:
            raise UnsupportedOperationError("Positional writes are not supported")
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        if offset or length:
            start = offset or 0
            end = start + length if length else None
            payload = payload[start:end]
        LOGGER.debug("Writing %d bytes to s3://%s/%s", len(payload), self._bucket, combined)
        return await asyncio.to_thread(
            self._client.put_object,
            Bucket=self._bucket,
            Key=combined,
            Body=payload,
        )

    async def mkdir(self, path: str) -> dict[str, Any]:
        """Create an explicit directory marker (an empty object ending in ``/``)."""

        resolve_key(self._prefix, path)
        if not path.endswith(SEPARATOR):
            path += SEPARATOR
        return await self.write(path, b"")

    async def get_full_file_info(self, path: str) -> FileNode:
        return await self._resolver.get_full_file_info(path)

    async def rm(self, path: str, *, recursive: bool = True) -> list[dict[str, Any]]:
        return await self._deleter.rm(path, recursive=recursive)

    def find(
        self,
        *,
        file: bool = True,
        directory: bool = True,
        name_pattern: Optional[Pattern] = None,
        path_pattern: Optional[Pattern] = None,
        starting_path: str = "",
    ) -> AsyncIterator[FileNode]:
        return self._finder.find(
            file=file,
            directory=directory,
            name_pattern=name_pattern,
            path_pattern=path_pattern,
            starting_path=starting_path,
        )

    async def find_paths(self, **options) -> list[str]:
        return await self._finder.find_paths(**options)

    def _create_client(self, client_factory: Callable[..., object], connection: dict[str, Any]):
        config = Config(signature_version="s3v4")
        return client_factory("s3", config=config, **connection)

    async def _iter_body(self, combined: str, chunk_size: int) -> AsyncIterator[bytes]:
        response = await asyncio.to_thread(self._client.get_object, Bucket=self._bucket, Key=combined)
        body = response["Body"]
        try:
            while True:
                chunk = await asyncio.to_thread(body.read, chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            body.close()
