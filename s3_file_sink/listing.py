from __future__ import annotations
"""Paginated listing against a single bucket."""
import asyncio
import logging
from typing import AsyncIterator, Optional

from .models import ListingPage, ObjectEntry

LOGGER = logging.getLogger(__name__)

MAX_PAGE_SIZE = 1000


class ListingAggregator:
    """Drives ``list_objects_v2`` and follows continuation tokens.

    Every request, including continuation requests, targets the bucket given
    at construction. Pages are fetched one after another.
    """

    def __init__(self, client, bucket: str, page_size: int = MAX_PAGE_SIZE):
        self._client = client
        self._bucket = bucket
        self._page_size = min(max(int(page_size), 1), MAX_PAGE_SIZE)

    async def fetch_page(
        self,
        prefix: str,
        delimiter: str | None = None,
        continuation_token: str | None = None,
    ) -> ListingPage:
        list_params = {"Bucket": self._bucket, "MaxKeys": self._page_size}
        if prefix:
            list_params["Prefix"] = prefix
        if delimiter:
            list_params["Delimiter"] = delimiter
        if continuation_token:
            list_params["ContinuationToken"] = continuation_token

        LOGGER.debug(
            "Listing s3://%s/%s (delimiter=%r, continuation=%s)",
            self._bucket,
            prefix,
            delimiter,
            continuation_token is not None,
        )
        response = await asyncio.to_thread(self._client.list_objects_v2, **list_params)
        return ListingPage.from_response(response)

    async def iter_pages(
        self,
        prefix: str,
        delimiter: str | None = None,
        first_page: Optional[ListingPage] = None,
    ) -> AsyncIterator[ListingPage]:
        """Yield every page for ``prefix``.

        When ``first_page`` is given it is yielded as is and only the pages
        after it are requested.
        """

        page = first_page or await self.fetch_page(prefix, delimiter)
        while True:
            yield page
            if not page.has_more:
                break
            page = await self.fetch_page(prefix, delimiter, page.next_token)

    async def iter_entries(self, prefix: str, delimiter: str | None = None) -> AsyncIterator[ObjectEntry]:
        async for page in self.iter_pages(prefix, delimiter):
            for entry in page.entries:
                yield entry

    async def list_all(self, prefix: str, delimiter: str | None = None) -> ListingPage:
        """Return the union of all pages, in page then entry order."""

        merged = ListingPage()
        async for page in self.iter_pages(prefix, delimiter):
            merged.entries.extend(page.entries)
            merged.common_prefixes.extend(page.common_prefixes)
        return merged
