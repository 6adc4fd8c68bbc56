from __future__ import annotations
"""File versus directory resolution for a single path."""
import logging

from .errors import PathNotFoundError
from .listing import ListingAggregator
from .models import FileNode
from .nodes import NodeSynthesizer
from .paths import SEPARATOR, dir_name, resolve_key

LOGGER = logging.getLogger(__name__)


class DirectoryResolver:
    """Decides whether a path names an object or a virtual directory.

    Only one level is inspected: listings are scoped with the separator as
    delimiter, so deeper keys show up as common prefixes.
    """

    def __init__(self, listing: ListingAggregator, nodes: NodeSynthesizer, prefix: str = ""):
        self._listing = listing
        self._nodes = nodes
        self._prefix = prefix

    async def get_full_file_info(self, path: str) -> FileNode:
        """Return the node for ``path``; directory nodes include their children.

        Raises:
            PathNotAllowedError: when the path contains ``..``.
            PathNotFoundError: when nothing is stored at or below the path.
        """

        combined = resolve_key(self._prefix, path)
        first_page = await self._listing.fetch_page(combined, SEPARATOR)

        entries = first_page.entries
        if len(entries) == 1 and entries[0].key == combined:
            node = self._nodes.from_entry(entries[0], dir_name(path))
            if not node.directory:
                return node
            # A directory marker; its children may sit in common prefixes or later pages.

        if first_page.is_empty:
            raise PathNotFoundError(path)

        if (
            not path.endswith(SEPARATOR)
            and len(first_page.common_prefixes) == 1
            and first_page.common_prefixes[0] == combined + SEPARATOR
        ):
            # Without the separator the listing only shows the directory itself.
            LOGGER.debug("Resolving %r again as a directory", path)
            return await self.get_full_file_info(path + SEPARATOR)

        info = self._nodes.directory(combined, path)
        async for page in self._listing.iter_pages(combined, SEPARATOR, first_page=first_page):
            for entry in page.entries:
                if entry.key == combined:
                    continue
                info.children.append(self._nodes.from_entry(entry, path))
            for common_prefix in page.common_prefixes:
                info.children.append(self._nodes.from_common_prefix(common_prefix, path))
        return info
