from __future__ import annotations
"""Single key and recursive deletion in batches."""
import asyncio
import logging
from typing import Any

from .errors import BatchDeleteError, NoMatchingFilesError
from .listing import ListingAggregator
from .paths import resolve_key

LOGGER = logging.getLogger(__name__)

DELETE_BATCH_SIZE = 1000


class BatchDeleter:
    def __init__(
        self,
        client,
        bucket: str,
        listing: ListingAggregator,
        prefix: str = "",
        batch_size: int = DELETE_BATCH_SIZE,
    ):
        self._client = client
        self._bucket = bucket
        self._listing = listing
        self._prefix = prefix
        self._batch_size = min(max(int(batch_size), 1), DELETE_BATCH_SIZE)

    async def rm(self, path: str, *, recursive: bool = True) -> list[dict[str, Any]]:
        """Delete ``path``, or everything stored under it when ``recursive``.

        The existence of a single key is not checked. Deletion is not atomic:
        when a batch fails, earlier batches stay deleted and later ones are
        never sent.

        Raises:
            NoMatchingFilesError: when a recursive delete lists no objects.
            BatchDeleteError: when a batch reports no deleted objects.
        """

        combined = resolve_key(self._prefix, path)
        if not recursive:
            keys = [combined]
        else:
            listing = await self._listing.list_all(combined)
            keys = [entry.key for entry in listing.entries]
            if not keys:
                raise NoMatchingFilesError(path)
        return await self.delete_keys(keys)

    async def delete_keys(self, keys: list[str]) -> list[dict[str, Any]]:
        results: list[dict[str, Any]] = []
        for start in range(0, len(keys), self._batch_size):
            batch = keys[start:start + self._batch_size]
            LOGGER.debug("Deleting %d objects from s3://%s", len(batch), self._bucket)
            response = await asyncio.to_thread(
                self._client.delete_objects,
                Bucket=self._bucket,
                Delete={"Objects": [{"Key": key} for key in batch]},
            )
            if not response.get("Deleted"):
                LOGGER.warning(
                    "Delete batch starting at %r removed nothing; %d keys left undeleted",
                    batch[0],
                    len(keys) - start,
                )
                raise BatchDeleteError(response, results)
            results.append(response)
        return results
