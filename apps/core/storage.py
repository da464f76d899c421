"""
Blob store used for product image renditions.

Thin adapter over Django's storage API so the same code writes to the local
filesystem in development, S3 in production and memory in tests.
"""
import logging
from datetime import datetime
from typing import List, Optional

from django.core.files.base import ContentFile
from django.core.files.storage import Storage, default_storage

from apps.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class BlobStore:
    """put / list_by_prefix / delete over a Django Storage backend."""

    def __init__(self, storage: Optional[Storage] = None):
        self.storage = storage or default_storage

    def put(self, path: str, data: bytes, content_type: str) -> str:
        """Write a blob and return its public URL."""
        content = ContentFile(data)
        content.content_type = content_type
        try:
            name = self.storage.save(path, content)
            url = self.storage.url(name)
        except Exception as e:
            logger.error(f"Blob upload failed for {path}: {str(e)}")
            raise StorageError(f"Failed to store {path}") from e
        logger.debug(f"Stored blob {name} ({content_type}, {len(data)} bytes)")
        return url

    def list_by_prefix(self, prefix: str) -> List[str]:
        """Names of the files directly under ``prefix``; empty when it does not exist."""
        directory = prefix.rstrip("/")
        try:
            _, files = self.storage.listdir(directory)
        except FileNotFoundError:
            return []
        except Exception as e:
            raise StorageError(f"Failed to list {prefix}") from e
        return [f"{directory}/{name}" for name in files]

    def list_folders(self, prefix: str) -> List[str]:
        """Names of the sub-folders directly under ``prefix``."""
        try:
            folders, _ = self.storage.listdir(prefix.rstrip("/"))
        except FileNotFoundError:
            return []
        except Exception as e:
            raise StorageError(f"Failed to list {prefix}") from e
        return list(folders)

    def latest_modified(self, prefix: str) -> Optional[datetime]:
        """Newest modification time of the files directly under ``prefix``, or None when empty."""
        times = []
        for name in self.list_by_prefix(prefix):
            try:
                times.append(self.storage.get_modified_time(name))
            except FileNotFoundError:
                continue
            except Exception as e:
                raise StorageError(f"Failed to stat {name}") from e
        return max(times) if times else None

    def delete(self, name: str) -> None:
        try:
            self.storage.delete(name)
        except Exception as e:
            logger.error(f"Blob delete failed for {name}: {str(e)}")
            raise StorageError(f"Failed to delete {name}") from e

    def delete_prefix(self, prefix: str) -> int:
        """Delete every blob under ``prefix`` found by one listing call."""
        names = self.list_by_prefix(prefix)
        for name in names:
            self.delete(name)
            logger.info(f"Deleted blob: {name}")
        return len(names)
