"""Private blob store holding the dashboard CSV exports."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from aflboard.errors import BlobNotFound, StorageNotConfigured
from aflboard.settings import Settings


logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    def read_text(self, name: str) -> str:
        ...


class LocalBlobStore:
    """Directory-backed store: one container directory under a storage root."""

    def __init__(self, root: Path | str, container: str):
        self.root = Path(root)
        self.container = container

    @property
    def container_path(self) -> Path:
        return self.root / self.container

    def read_text(self, name: str) -> str:
        path = self.container_path / name
        # Names come from a fixed allow-list, but keep reads inside the container.
        if path.resolve().parent != self.container_path.resolve():
            raise BlobNotFound(name)
        try:
            return path.read_text(encoding="utf-8-sig")
        except FileNotFoundError:
            raise BlobNotFound(name) from None


def blob_store_from_settings(settings: Settings) -> LocalBlobStore:
    if not settings.storage_root:
        raise StorageNotConfigured("Server misconfigured: missing DATA_STORAGE_ROOT")
    logger.debug("Using blob container %s under %s", settings.container, settings.storage_root)
    return LocalBlobStore(settings.storage_root, settings.container)
