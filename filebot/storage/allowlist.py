"""
Allow-list of group chats permitted to use the bot.

The set lives in memory; a backend snapshots it to a flat JSON array after
every mutation and on shutdown. Persistence is best effort: read/write
failures are logged and the bot carries on with the in-memory state.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Iterator

import aiofiles

from ..exceptions import PersistenceError

logger = logging.getLogger(__name__)


class AllowListBackend(ABC):
    """Storage collaborator for AllowList: load a snapshot, save a snapshot."""

    @abstractmethod
    async def load(self) -> set[str]:
        ...

    @abstractmethod
    async def save(self, groups: set[str]) -> None:
        ...


class JsonFileAllowListBackend(AllowListBackend):
    """Persists the allow-list as a JSON array of strings in a single file."""

    def __init__(self, path: str) -> None:
        self.path = path

    async def load(self) -> set[str]:
        """
        Read the file if present. Raises PersistenceError when it exists but
        cannot be read or is not a JSON array.
        """
        if not os.path.exists(self.path):
            return set()
        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                raw = await f.read()
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, list):
            raise PersistenceError(
                f"{self.path} must contain a JSON array, got {type(data).__name__}"
            )
        groups = set()
        for item in data:
            if isinstance(item, str) and item:
                groups.add(item)
            else:
                logger.warning("Skipping invalid allow-list entry: %r", item)
        return groups

    async def save(self, groups: set[str]) -> None:
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            async with aiofiles.open(self.path, mode="w", encoding="utf-8") as f:
                await f.write(json.dumps(sorted(groups)))
        except OSError as e:
            raise PersistenceError(f"Could not write {self.path}: {e}") from e


class AllowList:
    """In-memory set of allowed group ids backed by an AllowListBackend."""

    def __init__(self, backend: AllowListBackend) -> None:
        self._backend = backend
        self._groups: set[str] = set()
        # Covers every read-modify-persist sequence
        self._lock = asyncio.Lock()

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._groups))

    async def load(self) -> None:
        """Populate the set from the backend. Errors leave the set empty."""
        async with self._lock:
            try:
                self._groups = await self._backend.load()
            except PersistenceError as e:
                logger.error("Error loading allowed groups: %s", e)
                self._groups = set()
                return
        logger.info("Loaded %d allowed group(s)", len(self._groups))

    async def add(self, group_id: str) -> bool:
        """Add a group and persist. Returns False if it was already present."""
        async with self._lock:
            if group_id in self._groups:
                await self._persist()
                return False
            self._groups.add(group_id)
            await self._persist()
        logger.info("Allowed group added: %s", group_id)
        return True

    async def remove(self, group_id: str) -> bool:
        """Remove a group and persist. Returns False if it was not present."""
        async with self._lock:
            if group_id not in self._groups:
                await self._persist()
                return False
            self._groups.discard(group_id)
            await self._persist()
        logger.info("Allowed group removed: %s", group_id)
        return True

    async def flush(self) -> None:
        """Write the current snapshot, e.g. on shutdown."""
        async with self._lock:
            await self._persist()

    async def _persist(self) -> None:
        try:
            await self._backend.save(set(self._groups))
        except PersistenceError as e:
            logger.error("Error saving allowed groups: %s", e)
