from __future__ import annotations
"""Exceptions raised by the file sink.

Backend failures are not wrapped: botocore's ``ClientError`` and
``BotoCoreError`` reach the caller unchanged.
"""
from typing import Any


class FileSinkError(Exception):
    """Base class for errors raised by this package."""


class PathNotAllowedError(FileSinkError, ValueError):
    """Raised before any backend call when a path contains ``..``."""

    def __init__(self, path: str):
        super().__init__(f"Path not allowed: {path}")
        self.path = path


class PathNotFoundError(FileSinkError, FileNotFoundError):
    """Raised when a path matches neither an object nor a key prefix."""

    def __init__(self, path: str):
        super().__init__(f"Path not found: {path}")
        self.path = path


class UnsupportedOperationError(FileSinkError, NotImplementedError):
    """Raised for positional writes and synchronous reads."""


class NoMatchingFilesError(FileSinkError, FileNotFoundError):
    """Raised when a recursive delete finds nothing to delete."""

    def __init__(self, path: str):
        super().__init__(f"No matching files found to delete: {path}")
        self.path = path


class BatchDeleteError(FileSinkError):
    """Raised when a delete batch reports zero deleted objects.

    ``response`` is the raw response of the failing batch, ``results`` holds the
    responses of the batches that completed before it.
    """

    def __init__(self, response: dict[str, Any], results: list[dict[str, Any]] | None = None):
        errors = response.get("Errors") or []
        detail = errors[0].get("Message") if errors else "no objects were deleted"
        super().__init__(f"Batch delete failed: {detail}")
        self.response = response
        self.results = list(results or [])
