from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

from filelock import FileLock

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Key-value surface holding the token and session expiry."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def keys(self) -> Sequence[str]:
        raise NotImplementedError


class MemorySessionStore(SessionStore):
    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> Sequence[str]:
        return list(self._data)


class JsonFileSessionStore(SessionStore):
    """Store backed by a JSON file that several dashboard processes may share.

    Every read goes to disk so writes made by another process are visible.
    Each read-modify-write holds an OS-level lock on ``<file>.lock`` and
    replaces the file from a private temp file.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path).absolute()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = FileLock(str(self._path) + ".lock")

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict:
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Unreadable session file %s: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        tmp = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=self._path.name + ".",
            suffix=".tmp",
            delete=False,
        )
        try:
            with tmp:
                json.dump(data, tmp)
            os.replace(tmp.name, self._path)
        except BaseException:
            Path(tmp.name).unlink(missing_ok=True)
            raise

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return {k: str(v) for k, v in self._read().items() if v is not None}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = str(value)
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def clear(self) -> None:
        with self._lock:
            self._write({})

    def keys(self) -> Sequence[str]:
        with self._lock:
            return list(self._read())
