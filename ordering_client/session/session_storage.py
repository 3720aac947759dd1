"""Session-scoped key/value storage behind the cart.

Only `get_item` / `set_item` are needed, so anything with those two methods
can stand in (tests use InMemorySessionStorage). Writers are not locked
against each other: two writers on the same key are last-write-wins.
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Dict, Optional, Protocol


class StorageQuotaExceeded(OSError):
    pass


class SessionStorage(Protocol):
    """get/set of string values by key.

    Implementations signal an unusable backend by raising; CartStore logs any
    such failure and carries on from memory.
    """

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class InMemorySessionStorage:
    def __init__(self, max_bytes: Optional[int] = None) -> None:
        self._items: Dict[str, str] = {}
        self.max_bytes = max_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            used = sum(len(k) + len(v) for k, v in self._items.items() if k != key)
            if used + len(key) + len(value) > self.max_bytes:
                raise StorageQuotaExceeded(f"storage quota of {self.max_bytes} bytes exceeded")
        self._items[key] = value


class FileSessionStorage:
    """One JSON file per session under `directory`.

    The file name is a digest of the session id, so a client-chosen id never
    becomes a path component.
    """

    def __init__(self, directory: str, session_id: str) -> None:
        digest = hashlib.sha256(session_id.encode("utf-8")).hexdigest()
        self.directory = Path(directory)
        self.path = self.directory / f"{digest}.json"
        if self.path.resolve().parent != self.directory.resolve():
            raise ValueError(f"session file escapes {directory}")

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self.path)
