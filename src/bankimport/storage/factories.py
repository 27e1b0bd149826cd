"""Object storage factory functions."""

from typing import Optional

from bankimport.config import Settings
from bankimport.storage.base import ObjectStorage
from bankimport.storage.local import LocalObjectStorage


def create_storage(settings: Settings) -> Optional[ObjectStorage]:
    """Create the configured object storage, or None when it is disabled."""
    if not settings.storage_dir:
        return None
    return LocalObjectStorage(settings.storage_dir)
