"""Directory-style access to objects stored under a prefix of an S3 bucket."""
from .errors import (
    BatchDeleteError,
    FileSinkError,
    NoMatchingFilesError,
    PathNotAllowedError,
    PathNotFoundError,
    UnsupportedOperationError,
)
from .find import create_test
from .models import FileNode, FileStat, ListingPage, ObjectEntry
from .profiles import ConnectionProfile, ProfileStorage
from .services import S3FileSink
from .settings import SettingsStorage, SinkSettings

__all__ = [
    "BatchDeleteError",
    "ConnectionProfile",
    "FileNode",
    "FileSinkError",
    "FileStat",
    "ListingPage",
    "NoMatchingFilesError",
    "ObjectEntry",
    "PathNotAllowedError",
    "PathNotFoundError",
    "ProfileStorage",
    "S3FileSink",
    "SettingsStorage",
    "SinkSettings",
    "UnsupportedOperationError",
    "create_test",
]
