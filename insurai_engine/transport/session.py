"""
Key-value session stores holding the bearer credential.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

import structlog

logger = structlog.get_logger()


@runtime_checkable
class SessionStore(Protocol):
    """Persistent key-value session store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def clear(self) -> None:
        ...


class InMemorySessionStore:
    """
    Session store kept in memory.

    NOT persistent - intended for tests and one-shot CLI runs.
    """

    def __init__(self, values: Optional[dict[str, str]] = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def clear(self) -> None:
        self._values.clear()


class FileSessionStore:
    """
    Session store backed by a JSON file.

    Reads go to disk every time so a token written by another process (a
    login command, say) is picked up. A missing or corrupt file reads as an
    empty session. Writes are atomic (temp file + rename).
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("session_file_unreadable", path=str(self._path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=self._path.parent,
            prefix=f"tmp_{self._path.stem}",
            suffix=".json",
            delete=False,
        ) as f:
            json.dump(data, f)
            temp_path = f.name
        os.replace(temp_path, self._path)

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return str(value) if value is not None else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def clear(self) -> None:
        self._write({})
