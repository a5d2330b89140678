"""Business logic for managing wardrobe items."""

from __future__ import annotations

import asyncio
import logging
import posixpath
import uuid
from typing import Sequence

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.ai.photo_analyzer import PhotoAnalyzer
from outfitter.ai.schemas import ClothingAnalysis
from outfitter.db import models
from outfitter.imgproc.normalize import decode_data_uri, to_data_uri
from outfitter.schemas import ItemDraft, ItemUpdate
from outfitter.services.errors import (
    AuthorizationError,
    NotFoundError,
    RemoteServiceError,
    UnauthenticatedError,
    ValidationError,
)
from outfitter.storage.backend import BlobNotFoundError, StorageBackend, StorageError

logger = logging.getLogger(__name__)


def require_owner(owner_id: str | None) -> str:
    """Return ``owner_id`` or raise when the caller is anonymous."""

    if not owner_id:
        raise UnauthenticatedError("User not authenticated.")
    return owner_id


def normalize_key(key: str) -> str | None:
    """Return ``key`` in canonical form, or ``None`` if it escapes its folder."""

    if not key or key.startswith("/") or "\\" in key or ".." in key.split("/"):
        return None
    return posixpath.normpath(key)


def owner_prefixes(owner_id: str) -> tuple[str, str]:
    """Storage folders holding photos uploaded or processed for ``owner_id``."""

    return f"wardrobe-items/{owner_id}/", f"processed-items/{owner_id}/"


def is_owned_key(owner_id: str, key: str) -> bool:
    normalized = normalize_key(key)
    return normalized is not None and normalized.startswith(owner_prefixes(owner_id))


class WardrobeService:
    """Facade over storage, photo analysis and database operations for items."""

    def __init__(
        self,
        storage: StorageBackend,
        analyzer: PhotoAnalyzer,
        http_client: httpx.AsyncClient,
        *,
        catalog_prefix: str = "Public-Catalog/",
    ) -> None:
        self._storage = storage
        self._analyzer = analyzer
        self._http = http_client
        self._catalog_prefix = catalog_prefix

    async def list_visible_items(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
    ) -> list[models.ClothingItem]:
        """Return the caller's own items followed by public catalog items."""

        public_stmt = (
            select(models.ClothingItem)
            .where(models.ClothingItem.owner_id.is_(None))
            .order_by(models.ClothingItem.created_at, models.ClothingItem.id)
        )
        if not owner_id:
            return list((await session.scalars(public_stmt)).all())

        own_stmt = (
            select(models.ClothingItem)
            .where(models.ClothingItem.owner_id == owner_id)
            .order_by(models.ClothingItem.created_at, models.ClothingItem.id)
        )
        own = (await session.scalars(own_stmt)).all()
        public = (await session.scalars(public_stmt)).all()
        return [*own, *public]

    async def get_item(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        item_id: str,
    ) -> models.ClothingItem:
        """Return an item visible to the caller."""

        item = await session.get(models.ClothingItem, item_id)
        if item is None or (item.owner_id is not None and item.owner_id != owner_id):
            raise NotFoundError("Item not found.")
        return item

    async def _get_owned_item(
        self,
        session: AsyncSession,
        *,
        owner_id: str,
        item_id: str,
    ) -> models.ClothingItem:
        item = await session.get(models.ClothingItem, item_id)
        if item is None:
            raise NotFoundError("Item not found.")
        if item.owner_id != owner_id:
            logger.warning("User %s is not allowed to modify item %s", owner_id, item_id)
            raise AuthorizationError("You are not authorized to update this item.")
        return item

    async def analyze_photo(self, photo_data_uri: str) -> ClothingAnalysis:
        """Describe a clothing photo with the vision model."""

        return await self._analyzer.analyze(photo_data_uri)

    async def add_items(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        drafts: Sequence[ItemDraft],
    ) -> list[models.ClothingItem]:
        """Persist a batch of items in a single commit.

        Drafts that carry full metadata are stored as given and must point at
        a photo in the caller's own storage folders. Drafts without metadata
        are copied into the caller's storage folder and described by the photo
        analysis model.
        """

        owner_id = require_owner(owner_id)
        if not drafts:
            raise ValidationError("Invalid data provided for one or more items.")
        for draft in drafts:
            if draft.has_metadata and not is_owned_key(owner_id, draft.storage_path):
                logger.warning("User %s sent a foreign storage path: %s", owner_id, draft.storage_path)
                raise ValidationError(f"Invalid storage path: {draft.storage_path}")

        created: list[models.ClothingItem] = []
        for draft in drafts:
            if draft.has_metadata:
                item = models.ClothingItem(
                    owner_id=owner_id,
                    photo_url=draft.photo_url,
                    storage_path=normalize_key(draft.storage_path),
                    type=draft.type,
                    color=draft.color,
                    texture=draft.texture,
                    brand=draft.brand or "Unknown",
                    fit=draft.fit,
                    season=draft.season,
                )
            else:
                item = await self._import_catalog_item(owner_id, draft)
            created.append(item)

        session.add_all(created)
        await session.commit()
        logger.info("Added %d items for user %s", len(created), owner_id)
        return created

    async def _import_catalog_item(self, owner_id: str, draft: ItemDraft) -> models.ClothingItem:
        data, content_type = await self._fetch_image(draft)
        extension = content_type.split("/")[-1] or "jpg"
        key = f"wardrobe-items/{owner_id}/{uuid.uuid4().hex}.{extension}"
        await self._save_blob(key, data, content_type)

        analysis = await self._analyzer.analyze(to_data_uri(data, content_type))
        return models.ClothingItem(
            owner_id=owner_id,
            photo_url=self._storage.signed_url(key),
            storage_path=key,
            type=analysis.type,
            color=analysis.color,
            texture=analysis.texture,
            brand=analysis.brand or "Unknown",
            fit=analysis.fit,
            season=analysis.season,
        )

    async def _fetch_image(self, draft: ItemDraft) -> tuple[bytes, str]:
        key = normalize_key(draft.storage_path)
        if key is None:
            raise ValidationError(f"Invalid storage path: {draft.storage_path}")
        if key.startswith(self._catalog_prefix):
            try:
                return await self._storage.read(key)
            except BlobNotFoundError as exc:
                raise ValidationError(f"Catalog image not found: {draft.storage_path}") from exc

        try:
            response = await self._http.get(draft.photo_url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Could not download %s: %s", draft.photo_url, exc)
            raise RemoteServiceError("Could not download the item photo.") from exc
        content_type = response.headers.get("content-type", "image/jpeg").split(";")[0]
        return response.content, content_type or "image/jpeg"

    async def _save_blob(self, key: str, data: bytes, content_type: str) -> None:
        try:
            await self._storage.save(key, data, content_type=content_type)
        except StorageError as exc:
            logger.error("Failed to store %s: %s", key, exc)
            raise RemoteServiceError("Could not store the image.") from exc

    async def _delete_blob(self, owner_id: str, key: str) -> None:
        """Delete one of the owner's stored photos; a missing object is only logged."""

        if not key:
            return
        if not is_owned_key(owner_id, key):
            logger.warning("Keeping %s: not in the storage folders of user %s", key, owner_id)
            return
        try:
            await self._storage.delete(key)
        except BlobNotFoundError:
            logger.warning("Image not found in storage, continuing: %s", key)
            return
        except StorageError as exc:
            logger.error("Error deleting image from storage %s: %s", key, exc)
            raise RemoteServiceError("Could not delete the stored image.") from exc
        logger.info("Deleted image from storage: %s", key)

    async def update_item(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        item_id: str,
        changes: ItemUpdate,
    ) -> models.ClothingItem:
        """Overwrite the descriptive attributes of an owned item."""

        owner_id = require_owner(owner_id)
        item = await self._get_owned_item(session, owner_id=owner_id, item_id=item_id)
        item.type = changes.type
        item.color = changes.color
        item.texture = changes.texture
        item.brand = changes.brand or "Unknown"
        item.fit = changes.fit
        item.season = changes.season
        await session.commit()
        return item

    async def replace_item_image(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        item_id: str,
        photo_data_uri: str,
    ) -> models.ClothingItem:
        """Swap the item's photo for the one encoded in ``photo_data_uri``."""

        owner_id = require_owner(owner_id)
        item = await self._get_owned_item(session, owner_id=owner_id, item_id=item_id)
        image = decode_data_uri(photo_data_uri)

        await self._delete_blob(owner_id, item.storage_path)

        key = f"wardrobe-items/{owner_id}/{uuid.uuid4().hex}.{image.extension}"
        await self._save_blob(key, image.data, image.content_type)
        item.photo_url = self._storage.signed_url(key)
        item.storage_path = key
        await session.commit()
        return item

    async def delete_item(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        item_id: str,
    ) -> None:
        """Delete one item; deleting an unknown item is a no-op."""

        if not item_id:
            raise ValidationError("Item ID is required.")
        await self.delete_items(session, owner_id=owner_id, item_ids=[item_id])

    async def delete_items(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        item_ids: Sequence[str],
    ) -> int:
        """Delete items, their photos, and their references in the caller's outfits.

        Ownership of every existing item is checked before anything is
        removed. Returns the number of item records deleted.
        """

        if not item_ids:
            raise ValidationError("Invalid input: Expected an array of item IDs.")
        owner_id = require_owner(owner_id)
        wanted = list(dict.fromkeys(item_ids))

        stmt = select(models.ClothingItem).where(models.ClothingItem.id.in_(wanted))
        items = list((await session.scalars(stmt)).all())
        for item in items:
            if item.owner_id != owner_id:
                raise AuthorizationError(f"You are not authorized to delete item {item.id}.")
        missing = set(wanted) - {item.id for item in items}
        if missing:
            logger.warning("Items not found for deletion: %s", ", ".join(sorted(missing)))

        results = await asyncio.gather(
            *(self._delete_blob(owner_id, item.storage_path) for item in items),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            raise failures[0]

        for item in items:
            await session.delete(item)
        await session.commit()

        await self.remove_item_references(session, owner_id=owner_id, item_ids=wanted)
        logger.info("Deleted %d items for user %s", len(items), owner_id)
        return len(items)

    async def remove_item_references(
        self,
        session: AsyncSession,
        *,
        owner_id: str,
        item_ids: Sequence[str],
    ) -> int:
        """Drop ``item_ids`` from every outfit of ``owner_id`` containing any of them."""

        stmt = select(models.Outfit).where(
            models.Outfit.owner_id == owner_id,
            models.Outfit.members.any(models.OutfitItem.item_id.in_(item_ids)),
        )
        outfits = list((await session.scalars(stmt)).all())
        if not outfits:
            return 0

        removed = set(item_ids)
        for outfit in outfits:
            outfit.set_item_ids([item_id for item_id in outfit.item_ids if item_id not in removed])
        await session.commit()
        return len(outfits)
