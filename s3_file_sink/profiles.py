from __future__ import annotations
"""Named S3 connections whose secret keys live in the OS keychain."""
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any

import keyring
from keyring.errors import KeyringError

KEYRING_SERVICE = "s3-file-sink"


@dataclass
class ConnectionProfile:
    """Credentials and endpoint for one S3 compatible service."""

    name: str
    endpoint_url: str = ""
    access_key: str = ""
    secret_key: str = ""
    region_name: str = ""

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``boto3.client("s3", ...)``; empty values are left out."""

        kwargs = {
            "endpoint_url": self.endpoint_url,
            "aws_access_key_id": self.access_key,
            "aws_secret_access_key": self.secret_key,
            "region_name": self.region_name,
        }
        return {key: value for key, value in kwargs.items() if value}

    def to_public_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "endpoint_url": self.endpoint_url,
            "access_key": self.access_key,
            "region_name": self.region_name,
        }


class KeychainStore:
    """Keyring access for profile secret keys.

    Keyring backend failures read as a missing secret.
    """

    def __init__(self, service_name: str = KEYRING_SERVICE):
        self._service_name = service_name

    def get_secret(self, profile_name: str) -> str:
        if not profile_name:
            return ""
        try:
            return keyring.get_password(self._service_name, profile_name) or ""
        except KeyringError:
            return ""

    def set_secret(self, profile_name: str, secret_key: str) -> None:
        if not profile_name:
            return
        if not secret_key:
            self.delete_secret(profile_name)
            return
        try:
            keyring.set_password(self._service_name, profile_name, secret_key)
        except KeyringError:
            return

    def delete_secret(self, profile_name: str) -> None:
        if not profile_name:
            return
        try:
            keyring.delete_password(self._service_name, profile_name)
        except KeyringError:
            return


class ProfileStorage:
    """JSON file of profiles without secrets, plus the keychain for the secrets."""

    def __init__(self, storage_path: str | Path | None = None, keychain: KeychainStore | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3_file_sink_profiles.json"
        self._path = Path(storage_path)
        self._keychain = keychain or KeychainStore()

    def load(self) -> list[ConnectionProfile]:
        data = self._read_entries()
        profiles: list[ConnectionProfile] = []
        migrated = False
        for entry in data:
            name = entry.get("name")
            if not isinstance(name, str) or not name:
                continue
            secret_key = entry.get("secret_key") or ""
            if secret_key:
                # Plaintext secret from an older file; move it to the keychain.
                migrated = True
                self._keychain.set_secret(name, secret_key)
            else:
                secret_key = self._keychain.get_secret(name)
            profiles.append(
                ConnectionProfile(
                    name=name,
                    endpoint_url=str(entry.get("endpoint_url") or ""),
                    access_key=str(entry.get("access_key") or ""),
                    secret_key=secret_key,
                    region_name=str(entry.get("region_name") or ""),
                )
            )
        if migrated:
            self._write_data([profile.to_public_dict() for profile in profiles])
        return profiles

    def get(self, name: str) -> ConnectionProfile:
        for profile in self.load():
            if profile.name == name:
                return profile
        raise KeyError(f"Profile '{name}' does not exist")

    def save(self, profiles: list[ConnectionProfile]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        for profile in profiles:
            self._keychain.set_secret(profile.name, profile.secret_key)
        existing_names = {entry.get("name") for entry in self._read_entries()}
        current_names = {profile.name for profile in profiles}
        for name in existing_names - current_names:
            if isinstance(name, str):
                self._keychain.delete_secret(name)
        self._write_data([profile.to_public_dict() for profile in profiles])

    def _read_entries(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return []
        if not isinstance(data, list):
            return []
        return [entry for entry in data if isinstance(entry, dict)]

    def _write_data(self, data: list[dict[str, str]]) -> None:
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")
