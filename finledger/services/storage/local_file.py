"""
Local JSON File Storage

The default production backend. Each key is stored as `<key>.json` in a
data directory, so the files can be inspected, backed up or deleted by
hand.

Writes go to a temporary file in the same directory and are renamed
over the target, so a crash mid-write never leaves a half-written
value behind. Transient OS errors are retried before being surfaced as
StorageError.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finledger.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
)


KEY_PATTERN = re.compile(r"^[A-Za-z0-9_@-][A-Za-z0-9_.@-]*$")
FILE_SUFFIX = ".json"


class JsonFileStorage(KeyValueStorageInterface):
    """Key-value store with one UTF-8 JSON file per key."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{FILE_SUFFIX}"

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _write(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return self._read(path)
        except OSError as e:
            raise StorageError(f"Failed to read key {key}: {e}")

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self._write(path, value)
        except OSError as e:
            raise StorageError(f"Failed to write key {key}: {e}")

    def remove_item(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to remove key {key}: {e}")

    def keys(self) -> list[str]:
        if not self._data_dir.is_dir():
            return []
        return sorted(
            path.stem
            for path in self._data_dir.glob(f"*{FILE_SUFFIX}")
            if KEY_PATTERN.match(path.stem)
        )
