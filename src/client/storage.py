"""Persistent storage for the active role, keyed per user."""

import asyncio
import json
from pathlib import Path
from typing import Protocol
from uuid import UUID

from src.utils.logger import get_logger

logger = get_logger(__name__)

ACTIVE_ROLE_KEY_PREFIX = "grant_tracker_active_role"


def active_role_key(user_id: UUID) -> str:
    return f"{ACTIVE_ROLE_KEY_PREFIX}:{user_id}"


class ActiveRoleStore(Protocol):
    async def get(self, user_id: UUID) -> str | None: ...

    async def set(self, user_id: UUID, role: str) -> None: ...

    async def clear(self, user_id: UUID) -> None: ...


class InMemoryActiveRoleStore:
    def __init__(self):
        self._values: dict[str, str] = {}

    async def get(self, user_id: UUID) -> str | None:
        return self._values.get(active_role_key(user_id))

    async def set(self, user_id: UUID, role: str) -> None:
        self._values[active_role_key(user_id)] = role

    async def clear(self, user_id: UUID) -> None:
        self._values.pop(active_role_key(user_id), None)


class JsonFileActiveRoleStore:
    """Active roles in a small JSON file; survives process restarts."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Unreadable active role file", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self.path)

    async def get(self, user_id: UUID) -> str | None:
        async with self._lock:
            return self._read().get(active_role_key(user_id))

    async def set(self, user_id: UUID, role: str) -> None:
        async with self._lock:
            data = self._read()
            data[active_role_key(user_id)] = role
            self._write(data)

    async def clear(self, user_id: UUID) -> None:
        async with self._lock:
            data = self._read()
            if data.pop(active_role_key(user_id), None) is not None:
                self._write(data)
