"""Object storage for uploaded statement files."""

from bankimport.storage.base import ObjectStorage, StoredObject
from bankimport.storage.factories import create_storage
from bankimport.storage.local import LocalObjectStorage

__all__ = ["LocalObjectStorage", "ObjectStorage", "StoredObject", "create_storage"]
