"""Background removal and public catalog browsing."""

from __future__ import annotations

import logging
import uuid

from outfitter.imgproc.background import BackgroundRemovalClient
from outfitter.imgproc.normalize import decode_data_uri
from outfitter.schemas import StoredImage
from outfitter.services.errors import RemoteServiceError, ValidationError
from outfitter.services.wardrobe import require_owner
from outfitter.storage.backend import StorageBackend, StorageError

logger = logging.getLogger(__name__)


class ImageService:
    """Coordinates image processing with blob storage."""

    def __init__(
        self,
        storage: StorageBackend,
        background_client: BackgroundRemovalClient,
        *,
        catalog_prefix: str = "Public-Catalog/",
    ) -> None:
        self._storage = storage
        self._background_client = background_client
        self._catalog_prefix = catalog_prefix.rstrip("/") + "/"

    async def remove_background(
        self,
        *,
        owner_id: str | None,
        photo_data_uri: str,
    ) -> StoredImage:
        """Strip the background of a photo and store the result as PNG."""

        owner_id = require_owner(owner_id)
        if not photo_data_uri:
            raise ValidationError("Photo data is required.")
        image = decode_data_uri(photo_data_uri)

        processed = await self._background_client.remove_background(image.data)

        key = f"processed-items/{owner_id}/{uuid.uuid4().hex}.png"
        try:
            await self._storage.save(key, processed, content_type="image/png")
        except StorageError as exc:
            logger.error("Failed to store processed image %s: %s", key, exc)
            raise RemoteServiceError("Failed to remove background: could not store image.") from exc
        return StoredImage(photo_url=self._storage.signed_url(key), storage_path=key)

    async def catalog_folders(self) -> list[str]:
        """Return the names of public catalog folders."""

        return await self._storage.list_folders(self._catalog_prefix)

    async def catalog_images(self, folder: str) -> list[StoredImage]:
        """Return signed URLs for the images of one catalog folder."""

        if not folder or "/" in folder or folder in {".", ".."}:
            raise ValidationError("Invalid catalog folder.")
        keys = await self._storage.list_keys(f"{self._catalog_prefix}{folder}/")
        return [StoredImage(photo_url=self._storage.signed_url(key), storage_path=key) for key in keys]
