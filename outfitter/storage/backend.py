"""Blob storage for item photos and catalog images."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
import mimetypes
import time
from pathlib import Path
from urllib.parse import quote, urlencode

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the storage backend cannot complete an operation."""


class BlobNotFoundError(StorageError):
    """Raised when the requested object does not exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Object not found: {key}")


class StorageBackend:
    """Persistence interface for binary objects addressed by a path-like key."""

    async def save(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        raise NotImplementedError

    async def read(self, key: str) -> tuple[bytes, str]:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def list_keys(self, prefix: str) -> list[str]:
        raise NotImplementedError

    async def list_folders(self, prefix: str) -> list[str]:
        raise NotImplementedError

    def signed_url(self, key: str) -> str:
        raise NotImplementedError

    def verify_signature(self, key: str, expires: int, signature: str) -> bool:
        raise NotImplementedError


class LocalStorage(StorageBackend):
    """Filesystem-backed object store issuing HMAC-signed read URLs."""

    def __init__(
        self,
        root: Path,
        *,
        base_url: str = "http://localhost:8000",
        signing_key: str = "change-me",
        url_ttl_days: int = 36500,
    ) -> None:
        self._root = root.resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._base_url = base_url.rstrip("/")
        self._signing_key = signing_key.encode("utf-8")
        self._url_ttl_seconds = url_ttl_days * 24 * 60 * 60

    def _path_for(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if path == self._root or self._root not in path.parents:
            raise StorageError(f"Invalid storage key: {key!r}")
        return path

    async def save(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        """Write ``data`` at ``key`` and return the key."""

        path = self._path_for(key)
        await asyncio.to_thread(self._write_file, path, data)
        logger.debug("Stored %s (%s, %d bytes)", key, content_type or "unknown", len(data))
        return key

    @staticmethod
    def _write_file(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def read(self, key: str) -> tuple[bytes, str]:
        """Return object bytes and a content type guessed from the key."""

        path = self._path_for(key)
        if not path.is_file():
            raise BlobNotFoundError(key)
        data = await asyncio.to_thread(path.read_bytes)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return data, content_type

    async def delete(self, key: str) -> None:
        """Remove the object, raising :class:`BlobNotFoundError` if it is absent."""

        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError as exc:
            raise BlobNotFoundError(key) from exc
        except OSError as exc:
            raise StorageError(f"Could not delete {key}: {exc}") from exc

    async def list_keys(self, prefix: str) -> list[str]:
        """Return keys of files directly under the ``prefix`` folder."""

        folder = self._path_for(prefix.rstrip("/"))
        if not folder.is_dir():
            return []
        entries = await asyncio.to_thread(lambda: sorted(folder.iterdir()))
        return [
            entry.relative_to(self._root).as_posix()
            for entry in entries
            if entry.is_file()
        ]

    async def list_folders(self, prefix: str) -> list[str]:
        """Return names of sub-folders directly under ``prefix``."""

        folder = self._path_for(prefix.rstrip("/"))
        if not folder.is_dir():
            return []
        entries = await asyncio.to_thread(lambda: sorted(folder.iterdir()))
        return [entry.name for entry in entries if entry.is_dir()]

    def _signature(self, key: str, expires: int) -> str:
        message = f"{key}:{expires}".encode("utf-8")
        return hmac.new(self._signing_key, message, hashlib.sha256).hexdigest()

    def signed_url(self, key: str) -> str:
        """Return a long-lived URL that grants read access to ``key``."""

        self._path_for(key)
        expires = int(time.time()) + self._url_ttl_seconds
        query = urlencode({"expires": expires, "signature": self._signature(key, expires)})
        return f"{self._base_url}/media/{quote(key)}?{query}"

    def verify_signature(self, key: str, expires: int, signature: str) -> bool:
        if expires < int(time.time()):
            return False
        return hmac.compare_digest(self._signature(key, expires), signature)
