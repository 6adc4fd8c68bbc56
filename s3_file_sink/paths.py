from __future__ import annotations
"""Helpers that treat flat object keys as slash separated paths."""
from .errors import PathNotAllowedError

SEPARATOR = "/"
PARENT_REFERENCE = ".."


def is_allowed_path(path: str) -> bool:
    """Return False for any path that contains a parent reference."""

    return PARENT_REFERENCE not in path


def combine_path(root: str, path: str) -> str:
    """Join the configured root prefix and a relative path into an object key."""

    if path.startswith(SEPARATOR):
        path = path[1:]
    return root + path


def remove_slashes(path: str) -> str:
    return path.strip(SEPARATOR)


def base_name(key: str) -> str:
    """Return the last non-empty segment of ``key``."""

    stripped = key.rstrip(SEPARATOR)
    return stripped.rsplit(SEPARATOR, 1)[-1]


def dir_name(key: str) -> str:
    """Return everything before the last non-empty segment, ``""`` at the top level."""

    stripped = key.rstrip(SEPARATOR)
    if SEPARATOR not in stripped:
        return ""
    return stripped.rsplit(SEPARATOR, 1)[0]


def join_path(*parts: str) -> str:
    """Join segments with single separators, dropping empty and ``.`` segments.

    A leading separator on the first part is preserved, trailing ones are not.
    """

    segments: list[str] = []
    for part in parts:
        for segment in part.split(SEPARATOR):
            if segment and segment != ".":
                segments.append(segment)
    joined = SEPARATOR.join(segments)
    if parts and parts[0].startswith(SEPARATOR):
        return SEPARATOR + joined
    return joined


def resolve_key(root: str, path: str) -> str:
    """Validate ``path`` and return the object key it denotes under ``root``.

    Raises:
        PathNotAllowedError: when the path contains a parent reference.
    """

    if not is_allowed_path(path):
        raise PathNotAllowedError(path)
    return combine_path(root, path)
