"""Wardrobe item routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.ai.schemas import ClothingAnalysis
from outfitter.api.auth import OwnerDependency
from outfitter.api.container import ServiceContainer
from outfitter.api.deps import get_container, get_session
from outfitter.schemas import (
    ItemBatchCreate,
    ItemBatchDelete,
    ItemRead,
    ItemUpdate,
    PhotoPayload,
)

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", response_model=list[ItemRead])
async def list_items(
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> list[ItemRead]:
    """Return the caller's items and the public catalog items."""

    items = await container.wardrobe.list_visible_items(session, owner_id=owner_id)
    return [ItemRead.model_validate(item) for item in items]


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(
    item_id: str,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> ItemRead:
    item = await container.wardrobe.get_item(session, owner_id=owner_id, item_id=item_id)
    return ItemRead.model_validate(item)


@router.post("", response_model=list[ItemRead], status_code=status.HTTP_201_CREATED)
async def add_items(
    payload: ItemBatchCreate,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> list[ItemRead]:
    items = await container.wardrobe.add_items(session, owner_id=owner_id, drafts=payload.items)
    return [ItemRead.model_validate(item) for item in items]


@router.post("/analyze", response_model=ClothingAnalysis)
async def analyze_item(
    payload: PhotoPayload,
    container: ServiceContainer = Depends(get_container),
) -> ClothingAnalysis:
    """Describe a clothing photo without storing anything."""

    return await container.wardrobe.analyze_photo(payload.photo_data_uri)


@router.post("/delete", status_code=status.HTTP_200_OK)
async def delete_items(
    payload: ItemBatchDelete,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, object]:
    deleted = await container.wardrobe.delete_items(
        session,
        owner_id=owner_id,
        item_ids=payload.item_ids,
    )
    return {"success": True, "deleted": deleted}


@router.put("/{item_id}", response_model=ItemRead)
async def update_item(
    item_id: str,
    payload: ItemUpdate,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> ItemRead:
    item = await container.wardrobe.update_item(
        session,
        owner_id=owner_id,
        item_id=item_id,
        changes=payload,
    )
    return ItemRead.model_validate(item)


@router.put("/{item_id}/image", response_model=ItemRead)
async def replace_item_image(
    item_id: str,
    payload: PhotoPayload,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> ItemRead:
    item = await container.wardrobe.replace_item_image(
        session,
        owner_id=owner_id,
        item_id=item_id,
        photo_data_uri=payload.photo_data_uri,
    )
    return ItemRead.model_validate(item)


@router.delete("/{item_id}")
async def delete_item(
    item_id: str,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, bool]:
    await container.wardrobe.delete_item(session, owner_id=owner_id, item_id=item_id)
    return {"success": True}
