from __future__ import annotations
"""Conversion of listing records into :class:`FileNode` objects."""
from typing import Optional

from .models import FileNode, FileStat, ObjectEntry
from .paths import SEPARATOR, base_name, dir_name, join_path, remove_slashes

DEFAULT_ACCESS_URL_DOMAIN = "s3.amazonaws.com"


class NodeSynthesizer:
    """Builds nodes for one bucket and root prefix.

    Nodes are created fresh for every call and hold no reference back to the
    synthesizer.
    """

    def __init__(self, bucket: str, prefix: str = "", access_url_domain: str = DEFAULT_ACCESS_URL_DOMAIN):
        self._bucket = bucket
        self._prefix = prefix
        self._access_url_domain = access_url_domain

    def access_url(self, combined_path: str) -> str:
        url = f"https://{self._bucket}.{self._access_url_domain}/{combined_path}"
        return url.rstrip(SEPARATOR)

    def from_entry(self, entry: ObjectEntry, parent_path: Optional[str] = None) -> FileNode:
        """Create a node from an object record.

        With ``parent_path`` the relative path is built from it, otherwise it is
        derived from the key by removing the root prefix.
        """

        name = base_name(entry.key)
        parent = dir_name(entry.key)
        if parent_path is not None:
            rel_path = join_path(parent_path, name)
        else:
            rel_path = self._strip_prefix(join_path(parent, name))
        return FileNode(
            name=name,
            parent=parent,
            rel_path=remove_slashes(rel_path),
            directory=entry.key.endswith(SEPARATOR) and entry.size == 0,
            stat=FileStat(size=entry.size, mtime=entry.last_modified),
            access_url=self.access_url(join_path(parent, name)),
        )

    def from_common_prefix(self, prefix: str, parent_path: str = "") -> FileNode:
        name = base_name(prefix)
        parent = dir_name(prefix)
        return FileNode(
            name=name,
            parent=parent,
            rel_path=remove_slashes(join_path(parent_path, name)),
            directory=True,
            stat=FileStat(),
            access_url=self.access_url(join_path(parent, name)),
        )

    def directory(self, combined: str, path: str) -> FileNode:
        """Create an empty directory node for the key prefix ``combined``."""

        name = base_name(combined)
        parent = dir_name(combined)
        return FileNode(
            name=name,
            parent=parent,
            rel_path=remove_slashes(path),
            directory=True,
            stat=FileStat(),
            access_url=self.access_url(join_path(parent, name)),
            children=[],
        )

    def _strip_prefix(self, path: str) -> str:
        if not self._prefix:
            return path
        if path.startswith(self._prefix):
            return path[len(self._prefix):]
        if path == self._prefix.rstrip(SEPARATOR):
            return ""
        return path
