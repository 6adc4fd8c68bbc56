from __future__ import annotations
"""Sink configuration persistence helpers."""

from dataclasses import asdict, dataclass
import json
from pathlib import Path

from .deleter import DELETE_BATCH_SIZE
from .listing import MAX_PAGE_SIZE
from .nodes import DEFAULT_ACCESS_URL_DOMAIN


@dataclass
class SinkSettings:
    """Bucket, root prefix and tuning values for an :class:`S3FileSink`."""

    bucket: str = ""
    prefix: str = ""
    endpoint_url: str = ""
    region_name: str = ""
    profile: str = ""
    access_url_domain: str = DEFAULT_ACCESS_URL_DOMAIN
    page_size: int = MAX_PAGE_SIZE
    delete_batch_size: int = DELETE_BATCH_SIZE


_STRING_FIELDS = ("bucket", "prefix", "endpoint_url", "region_name", "profile", "access_url_domain")
_LIMITS = {"page_size": MAX_PAGE_SIZE, "delete_batch_size": DELETE_BATCH_SIZE}


def _coerce_limit(value, default: int, maximum: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number <= 0:
        return default
    return min(number, maximum)


class SettingsStorage:
    """JSON-backed persistence for :class:`SinkSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3_file_sink_settings.json"
        self._path = Path(storage_path)

    def load(self) -> SinkSettings:
        if not self._path.exists():
            return SinkSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return SinkSettings()
        if not isinstance(data, dict):
            return SinkSettings()

        defaults = SinkSettings()
        values = {}
        for name in _STRING_FIELDS:
            value = data.get(name, getattr(defaults, name))
            values[name] = value if isinstance(value, str) else getattr(defaults, name)
        if not values["access_url_domain"]:
            values["access_url_domain"] = DEFAULT_ACCESS_URL_DOMAIN
        for name, maximum in _LIMITS.items():
            values[name] = _coerce_limit(data.get(name), getattr(defaults, name), maximum)
        return SinkSettings(**values)

    def save(self, settings: SinkSettings) -> None:
        payload = asdict(settings)
        for name, maximum in _LIMITS.items():
            payload[name] = min(max(int(payload[name]), 1), maximum)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            return
