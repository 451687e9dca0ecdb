# switchboard/core/datasources/registry.py
"""
Datasource registry – named backend profiles, looked up case-insensitively.
"""
from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Iterator, Mapping

from switchboard.core.datasources.models import DatasourceProfile
from switchboard.core.errors import DatasourceNotFound

logger = logging.getLogger(__name__)


class DatasourceRegistry:
    """
    Read-mostly registry of datasource profiles.

    Profiles are keyed by their lower-cased name. Writers swap in a fresh
    mapping under a lock, so readers only ever see a complete snapshot and
    never need to lock. Registering a name that already exists (in any
    casing) replaces the previous profile: last registration wins.
    """

    def __init__(self, profiles: Mapping[str, DatasourceProfile] | None = None) -> None:
        self._lock = threading.Lock()
        self._profiles: Mapping[str, DatasourceProfile] = MappingProxyType({})
        for name, profile in (profiles or {}).items():
            self.register(name, profile)

    @staticmethod
    def _key(name: str) -> str:
        return str(name).lower()

    def register(self, name: str, profile: DatasourceProfile) -> None:
        """
        Insert or overwrite the profile stored under ``name``.

        Args:
            name: Lookup name (case-insensitive)
            profile: Profile to store
        """
        key = self._key(name)
        with self._lock:
            updated = dict(self._profiles)
            replaced = key in updated
            updated[key] = profile
            self._profiles = MappingProxyType(updated)

        logger.info(
            "%s datasource: %s -> %s",
            "Replaced" if replaced else "Registered",
            profile.name,
            profile.base_address,
        )

    def unregister(self, name: str) -> bool:
        """Remove ``name`` if present. Returns whether anything was removed."""
        key = self._key(name)
        with self._lock:
            if key not in self._profiles:
                return False
            updated = dict(self._profiles)
            del updated[key]
            self._profiles = MappingProxyType(updated)

        logger.info("Unregistered datasource: %s", name)
        return True

    def resolve(self, name: str) -> DatasourceProfile:
        """
        Look up a profile by name, ignoring case.

        Raises:
            DatasourceNotFound: If no profile is registered under ``name``
        """
        profiles = self._profiles
        try:
            return profiles[self._key(name)]
        except KeyError:
            raise DatasourceNotFound(
                name, [p.name for p in profiles.values()]
            ) from None

    def has(self, name: str) -> bool:
        return self._key(name) in self._profiles

    def list(self) -> list[DatasourceProfile]:
        return list(self._profiles.values())

    def names(self) -> list[str]:
        return [p.name for p in self._profiles.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[DatasourceProfile]:
        return iter(list(self._profiles.values()))

    def __len__(self) -> int:
        return len(self._profiles)
