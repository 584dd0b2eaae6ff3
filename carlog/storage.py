"""Key-value storage of JSON documents.

Values are serialized to JSON on write and parsed on read. A missing key
reads as the caller's default; there is no schema versioning.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)


class Storage:
    """Base class: subclasses provide raw text access per key."""

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, text: str) -> None:
        raise NotImplementedError

    def _delete(self, key: str) -> None:
        raise NotImplementedError

    def get(
        self,
        key: str,
        default: Any = None,
        object_hook: Optional[Callable[[Dict[str, Any]], Any]] = None,
    ) -> Any:
        """Load the value stored under `key`, or `default` when absent."""
        text = self._read(key)
        if text is None:
            return default
        return json.loads(text, object_hook=object_hook)

    def set(self, key: str, value: Any) -> None:
        """Overwrite the value stored under `key`."""
        self._write(key, json.dumps(value, ensure_ascii=False, indent=2))
        logger.debug("Stored %s", key)

    def remove(self, key: str) -> None:
        """Delete `key`. Removing a missing key is a no-op."""
        self._delete(key)
        logger.debug("Removed %s", key)


class FileStorage(Storage):
    """One `<key>.json` file per key inside a data directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as fp:
            return fp.read()

    def _write(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self._path(key), "w", encoding="utf-8") as fp:
            fp.write(text)

    def _delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class MemoryStorage(Storage):
    """Process-local storage, mostly for tests."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def _read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def _write(self, key: str, text: str) -> None:
        self.data[key] = text

    def _delete(self, key: str) -> None:
        self.data.pop(key, None)
