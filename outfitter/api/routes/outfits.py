"""Outfit routes, including AI suggestions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.api.auth import OwnerDependency
from outfitter.api.container import ServiceContainer
from outfitter.api.deps import get_container, get_session
from outfitter.schemas import (
    GenerateRequest,
    GenerateResponse,
    OutfitDraft,
    OutfitRead,
    OutfitUpdate,
)
from outfitter.services.profiles import unused_item_weight

router = APIRouter(prefix="/outfits", tags=["outfits"])


@router.get("", response_model=list[OutfitRead])
async def list_outfits(
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> list[OutfitRead]:
    outfits = await container.outfits.list_outfits(session, owner_id=owner_id)
    return [OutfitRead.model_validate(outfit) for outfit in outfits]


@router.post("", response_model=OutfitRead, status_code=status.HTTP_201_CREATED)
async def create_outfit(
    payload: OutfitDraft,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> OutfitRead:
    outfit = await container.outfits.create_outfit(session, owner_id=owner_id, draft=payload)
    return OutfitRead.model_validate(outfit)


@router.post("/generate", response_model=GenerateResponse)
async def generate_outfits(
    payload: GenerateRequest,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> GenerateResponse:
    """Suggest three outfits from the caller's wardrobe without saving them."""

    profile = await container.profiles.find_profile(session, uid=owner_id)
    suggestions = await container.outfits.generate_outfits(
        session,
        owner_id=owner_id,
        style_preferences=payload.style_preferences,
        outfit_requirements=payload.outfit_requirements,
        unused_item_priority=unused_item_weight(profile) if profile is not None else None,
    )
    return GenerateResponse(outfits=suggestions)


@router.get("/{outfit_id}", response_model=OutfitRead)
async def get_outfit(
    outfit_id: str,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> OutfitRead:
    outfit = await container.outfits.get_outfit(session, owner_id=owner_id, outfit_id=outfit_id)
    return OutfitRead.model_validate(outfit)


@router.put("/{outfit_id}", response_model=OutfitRead)
async def update_outfit(
    outfit_id: str,
    payload: OutfitUpdate,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> OutfitRead:
    outfit = await container.outfits.update_outfit(
        session,
        owner_id=owner_id,
        outfit_id=outfit_id,
        update=payload,
    )
    return OutfitRead.model_validate(outfit)


@router.delete("/{outfit_id}")
async def delete_outfit(
    outfit_id: str,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, bool]:
    await container.outfits.delete_outfit(session, owner_id=owner_id, outfit_id=outfit_id)
    return {"success": True}
