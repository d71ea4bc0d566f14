"""
Secure Storage - Key/value backends for private key records.

A backend provides async set(key, value), get(key) and keys(). The key
vault only looks methods up when it needs them, so a partial backend
fails with the name of the missing method.
"""

import json
import asyncio
import tempfile
import threading
from pathlib import Path
from typing import Optional, Protocol

from errors import missing_storage_method
from .crypto import set_secure_permissions


class SecureStorage(Protocol):
    """Interface expected from a secure storage backend."""

    async def set(self, key: str, value: str): ...

    async def get(self, key: str) -> Optional[str]: ...

    async def keys(self) -> list[str]: ...


def require_capability(storage, method_name: str):
    """
    Return the bound method `method_name` of storage.

    Raises: IdentityError(UNSATISFIED_SECURE_STORAGE_IMPLEMENTATION)
    """
    method = getattr(storage, method_name, None)
    if not callable(method):
        raise missing_storage_method(method_name)
    return method


class InMemorySecureStorage:
    """Process-local storage, mainly for tests and ephemeral identities."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def keys(self) -> list[str]:
        return list(self._data.keys())

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None


class FileSecureStorage:
    """
    JSON file storage with owner-only permissions.

    Writes go to a unique temp file that replaces the original, so a crash
    never leaves a half-written file behind. Read-modify-write cycles are
    serialized per instance.
    """

    def __init__(self, filepath: str | Path):
        self.filepath = Path(filepath)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        if not self.filepath.exists():
            return {}
        with open(self.filepath, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Corrupted secure storage file: {self.filepath}")
        return data

    def _write(self, data: dict[str, str]) -> None:
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            'w', dir=self.filepath.parent, prefix=self.filepath.name,
            suffix='.tmp', delete=False
        ) as f:
            temp_path = Path(f.name)
            json.dump(data, f, indent=2)
        try:
            set_secure_permissions(temp_path)
            temp_path.replace(self.filepath)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        set_secure_permissions(self.filepath)

    def _snapshot(self) -> dict[str, str]:
        with self._lock:
            return self._read()

    def _set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def _delete(self, key: str) -> bool:
        with self._lock:
            data = self._read()
            if key not in data:
                return False
            del data[key]
            self._write(data)
            return True

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._snapshot)
        return data.get(key)

    async def keys(self) -> list[str]:
        data = await asyncio.to_thread(self._snapshot)
        return list(data.keys())

    async def delete(self, key: str) -> bool:
        return await asyncio.to_thread(self._delete, key)
