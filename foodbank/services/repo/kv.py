from __future__ import annotations

import os
import re
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from foodbank.services.exceptions import RepoError
from foodbank.services.repo.json_repo import _atomic_write, _locked

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(ABC):
    """
    Narrow storage seam under the inventory store: whole string values by key.

    ``get``/``set`` never lock; callers doing read-modify-write hold ``lock(key)``
    for the whole cycle.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def lock(self, key: str): ...

    def close(self) -> None:
        pass


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        with self._lock:
            yield


class FileKeyValueStore(KeyValueStore):
    """One JSON file per key under ``directory``; writes are atomic replaces."""

    def __init__(self, directory: str):
        self.directory = directory
        self._thread_lock = threading.RLock()

    def _path(self, key: str, suffix: str = ".json") -> str:
        if not _SAFE_KEY.match(key):
            raise RepoError(f"Invalid storage key: {key!r}")
        return os.path.join(self.directory, key + suffix)

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise RepoError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        _atomic_write(self._path(key), value.encode("utf-8"))

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise RepoError(f"Failed to delete {path}: {e}") from e

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        # threads serialize here; the file lock covers other processes
        with self._thread_lock:
            with _locked(self._path(key, ".lock")):
                yield
