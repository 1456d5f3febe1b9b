# 📄 File: plantscan/shared/infrastructure/storage/file_store.py
#
# 🧭 Purpose (Layman Explanation):
# Keeps each saved item as a small JSON file in the app's own folder on the
# device, so favorites and cached plants survive an app restart.
#
# 🧪 Purpose (Technical Summary):
# Directory-backed KeyValueStore. One file per key (URL-quoted file name),
# atomic replace on write, blocking file I/O moved off the event loop.
#
# 🔗 Dependencies:
# - pathlib, os, tempfile for atomic file writes
# - asyncio.to_thread for non-blocking I/O
#
# 🔄 Connected Modules / Calls From:
# - plantscan.shared.config.storage (STORAGE_BACKEND=file)

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import quote, unquote

from .base import KeyValueStore

logger = logging.getLogger(__name__)

FILE_SUFFIX = ".json"


class FileKeyValueStore(KeyValueStore):
    """
    Durable store writing one JSON document per key under a base directory.

    The directory is scoped to the application; clear() only deletes files
    this store created.
    """

    backend_name = "file"

    def __init__(self, base_path: Union[str, Path]):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        return self.base_path / f"{quote(key, safe='')}{FILE_SUFFIX}"

    async def _read(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read_sync, key)

    async def _write(self, key: str, raw: str) -> None:
        await asyncio.to_thread(self._write_sync, key, raw)

    async def _delete(self, keys: List[str]) -> None:
        await asyncio.to_thread(self._delete_sync, keys)

    async def _list_keys(self) -> List[str]:
        return await asyncio.to_thread(self._list_keys_sync)

    def _read_sync(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write_sync(self, key: str, raw: str) -> None:
        path = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.base_path, prefix=".tmp-", suffix=FILE_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                tmp_file.write(raw)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(raw)} bytes to {path.name}")

    def _delete_sync(self, keys: List[str]) -> None:
        for key in keys:
            self._path_for(key).unlink(missing_ok=True)

    def _list_keys_sync(self) -> List[str]:
        return [
            unquote(path.name[: -len(FILE_SUFFIX)])
            for path in self.base_path.glob(f"*{FILE_SUFFIX}")
            if not path.name.startswith(".tmp-")
        ]
