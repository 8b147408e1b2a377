"""
OMNIDO - Persistence Adapter
============================
Key/value byte storage plus the JSON codec for entity collections.
File-based storage as primary; an in-memory variant for tests and embedding.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pydantic import TypeAdapter

from .schema import COLLECTIONS, Entity


class StorageError(Exception):
    """A write (or read) was rejected by the storage backend"""


class Storage:
    """Byte storage keyed by collection name. No cross-key atomicity."""

    def read(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def write(self, key: str, data: bytes) -> None:
        raise NotImplementedError


class MemoryStorage(Storage):
    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self.data: Dict[str, bytes] = dict(initial or {})

    def read(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def write(self, key: str, data: bytes) -> None:
        self.data[key] = bytes(data)


class FileStorage(Storage):
    """
    One JSON file per collection: {data_dir}/{key}.json

    The directory is created lazily on first write so that a read-only
    listing never touches the filesystem.
    """

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir).expanduser()

    def _get_file(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[bytes]:
        file_path = self._get_file(key)
        if not file_path.exists():
            return None
        try:
            return file_path.read_bytes()
        except OSError as e:
            raise StorageError(f"Cannot read {file_path}: {e}") from e

    def write(self, key: str, data: bytes) -> None:
        file_path = self._get_file(key)
        tmp_path = file_path.with_suffix(".json.tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "wb") as f:
                f.write(data)
            tmp_path.replace(file_path)
        except OSError as e:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                pass  # the original error is the one to report
            raise StorageError(f"Cannot write {file_path}: {e}") from e


# ========================================
# COLLECTION CODEC
# ========================================

_adapters: Dict[str, TypeAdapter] = {}


def _adapter(key: str) -> TypeAdapter:
    if key not in _adapters:
        _adapters[key] = TypeAdapter(List[COLLECTIONS[key]])
    return _adapters[key]


def encode_collection(key: str, items: Sequence[Entity]) -> bytes:
    """Serialize a whole collection as a JSON array"""
    payload = [item.model_dump(mode="json") for item in items]
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def decode_collection(key: str, data: bytes) -> List[Entity]:
    """
    Decode a collection written by encode_collection.

    Raises ValueError (json.JSONDecodeError or pydantic.ValidationError,
    both subclasses) when the data is corrupt.
    """
    payload = json.loads(data.decode("utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"Collection {key!r} is not a JSON array")
    return _adapter(key).validate_python(payload)
