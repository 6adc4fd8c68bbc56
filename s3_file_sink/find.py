from __future__ import annotations
"""Filtered traversal of everything stored below a path, a bit like ``find``."""
import inspect
import logging
import re
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

from .listing import ListingAggregator
from .models import FileNode
from .nodes import NodeSynthesizer
from .paths import resolve_key

LOGGER = logging.getLogger(__name__)

Pattern = Union[str, "re.Pattern[str]", Callable[[str], object]]
AsyncTest = Callable[[str], Awaitable[bool]]


def create_test(pattern: Optional[Pattern]) -> Optional[AsyncTest]:
    """Normalize a pattern into a single async predicate.

    Strings are compiled as regular expressions and compiled patterns are
    matched with ``search``. Callables may return a value or an awaitable.
    Returns ``None`` when there is nothing to test.
    """

    if not pattern:
        return None
    if isinstance(pattern, str):
        func = re.compile(pattern).search
    elif isinstance(pattern, re.Pattern):
        func = pattern.search
    elif callable(pattern):
        func = pattern
    else:
        raise TypeError(f"Unsupported pattern type: {type(pattern).__name__}")

    async def test(value: str) -> bool:
        result = func(value)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    return test


class Finder:
    """Streams nodes for every object below a starting path.

    Only object records become nodes. Virtual directories without a zero-byte
    marker are not emitted on their own.
    """

    def __init__(self, listing: ListingAggregator, nodes: NodeSynthesizer, prefix: str = ""):
        self._listing = listing
        self._nodes = nodes
        self._prefix = prefix

    def find(
        self,
        *,
        file: bool = True,
        directory: bool = True,
        name_pattern: Optional[Pattern] = None,
        path_pattern: Optional[Pattern] = None,
        starting_path: str = "",
    ) -> AsyncIterator[FileNode]:
        """Return an async iterator over matching nodes.

        Iteration ends once the last listing page has been processed; a backend
        error is raised from the iterator and ends the traversal.
        """

        combined = resolve_key(self._prefix, starting_path)
        return self._traverse(
            combined,
            file=file,
            directory=directory,
            name_test=create_test(name_pattern),
            path_test=create_test(path_pattern),
        )

    async def find_paths(self, **options) -> list[str]:
        return [node.rel_path async for node in self.find(**options)]

    async def _traverse(
        self,
        combined: str,
        *,
        file: bool,
        directory: bool,
        name_test: Optional[AsyncTest],
        path_test: Optional[AsyncTest],
    ) -> AsyncIterator[FileNode]:
        emitted = 0
        async for entry in self._listing.iter_entries(combined):
            node = self._nodes.from_entry(entry)
            if node.directory and not directory:
                continue
            if not node.directory and not file:
                continue
            if name_test and not await name_test(node.name):
                continue
            if path_test and not await path_test(node.rel_path):
                continue
            emitted += 1
            yield node
        LOGGER.debug("Find below %r finished with %d matches", combined, emitted)
