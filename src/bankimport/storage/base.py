"""Abstract object storage interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class StoredObject:
    """Listing entry for a stored object."""

    key: str
    size: int
    last_modified: datetime
    metadata: dict[str, str] = field(default_factory=dict)


class ObjectStorage(ABC):
    """Bucket-like store for raw statement bytes."""

    @abstractmethod
    def put(self, key: str, data: bytes, metadata: Optional[dict[str, str]] = None) -> None:
        """Store bytes under a key, replacing any previous object."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the object's bytes, or None if the key does not exist."""
        pass

    @abstractmethod
    def list(self, prefix: str = "") -> list[StoredObject]:
        """List objects whose key starts with prefix, sorted by key."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete an object. Deleting a missing key is not an error."""
        pass
