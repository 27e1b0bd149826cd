"""Object storage on the local filesystem."""

import json
import logging
from datetime import datetime, UTC
from pathlib import Path
from typing import Optional

from bankimport.domain.errors import StorageUnavailableError
from bankimport.storage.base import ObjectStorage, StoredObject

logger = logging.getLogger(__name__)

META_SUFFIX = ".meta.json"


class LocalObjectStorage(ObjectStorage):
    """Stores each object as a file under a root directory.

    Keys use ``/`` separators and map to nested directories. Metadata is kept
    in a ``<name>.meta.json`` file next to the object.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).expanduser().resolve()

    def _path(self, key: str) -> Path:
        if not key or key.startswith("/") or "\\" in key:
            raise ValueError(f"Invalid storage key: '{key}'")
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root) or path == self.root:
            raise ValueError(f"Storage key escapes the storage root: '{key}'")
        if path.name.endswith(META_SUFFIX):
            raise ValueError(f"Storage key may not end with '{META_SUFFIX}'")
        return path

    @staticmethod
    def _meta_path(path: Path) -> Path:
        return path.with_name(path.name + META_SUFFIX)

    def put(self, key: str, data: bytes, metadata: Optional[dict[str, str]] = None) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            meta_path = self._meta_path(path)
            if metadata:
                meta_path.write_text(json.dumps(metadata, sort_keys=True), encoding="utf-8")
            elif meta_path.exists():
                meta_path.unlink()
        except OSError as e:
            raise StorageUnavailableError(f"Could not write object '{key}': {e}") from e
        logger.debug("Stored %d byte(s) at %s", len(data), key)

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageUnavailableError(f"Could not read object '{key}': {e}") from e

    def list(self, prefix: str = "") -> list[StoredObject]:
        if not self.root.exists():
            return []
        objects = []
        try:
            for path in self.root.rglob("*"):
                if not path.is_file() or path.name.endswith(META_SUFFIX):
                    continue
                key = path.relative_to(self.root).as_posix()
                if not key.startswith(prefix):
                    continue
                stat = path.stat()
                objects.append(
                    StoredObject(
                        key=key,
                        size=stat.st_size,
                        last_modified=datetime.fromtimestamp(stat.st_mtime, UTC),
                        metadata=self._read_metadata(path),
                    )
                )
        except OSError as e:
            raise StorageUnavailableError(f"Could not list objects under '{prefix}': {e}") from e
        return sorted(objects, key=lambda obj: obj.key)

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
            self._meta_path(path).unlink(missing_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Could not delete object '{key}': {e}") from e

    def _read_metadata(self, path: Path) -> dict[str, str]:
        meta_path = self._meta_path(path)
        if not meta_path.exists():
            return {}
        try:
            return json.loads(meta_path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring unreadable metadata file %s", meta_path)
            return {}
