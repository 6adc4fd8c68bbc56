from __future__ import annotations
"""Data models for listing results and synthesized file nodes."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass
class ObjectEntry:
    """A single object record from a listing response."""

    key: str
    size: int = 0
    last_modified: Optional[datetime] = None

    @classmethod
    def from_response(cls, content: dict[str, Any]) -> "ObjectEntry":
        return cls(
            key=content["Key"],
            size=int(content.get("Size") or 0),
            last_modified=content.get("LastModified"),
        )


@dataclass
class ListingPage:
    """One page of a ``list_objects_v2`` response."""

    entries: list[ObjectEntry] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)
    next_token: Optional[str] = None
    truncated: bool = False

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "ListingPage":
        return cls(
            entries=[ObjectEntry.from_response(content) for content in response.get("Contents") or []],
            common_prefixes=[common["Prefix"] for common in response.get("CommonPrefixes") or []],
            next_token=response.get("NextContinuationToken"),
            truncated=bool(response.get("IsTruncated", False)),
        )

    @property
    def is_empty(self) -> bool:
        return not self.entries and not self.common_prefixes

    @property
    def has_more(self) -> bool:
        return self.truncated and bool(self.next_token)


@dataclass
class FileStat:
    size: int = 0
    mtime: Optional[datetime] = None

    @property
    def mtime_ms(self) -> Optional[int]:
        if self.mtime is None:
            return None
        return int(self.mtime.timestamp() * 1000)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"size": self.size}
        if self.mtime is not None:
            data["mtime"] = self.mtime.isoformat()
            data["mtimeMs"] = self.mtime_ms
        return data


@dataclass
class FileNode:
    """A file or (virtual) directory synthesized from a listing response.

    ``rel_path`` is relative to the sink's root prefix and never starts or ends
    with a separator. ``children`` is only populated on directory nodes returned
    by :meth:`S3FileSink.get_full_file_info`.
    """

    name: str
    parent: str
    rel_path: str
    directory: bool = False
    stat: FileStat = field(default_factory=FileStat)
    access_url: str = ""
    children: Optional[list["FileNode"]] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "parent": self.parent,
            "relPath": self.rel_path,
            "directory": self.directory,
            "stat": self.stat.to_dict(),
            "accessUrl": self.access_url,
        }
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data
