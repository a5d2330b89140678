"""Profile and account routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.api.auth import OwnerDependency
from outfitter.api.container import ServiceContainer
from outfitter.api.deps import get_container, get_session
from outfitter.schemas import NotificationSettings, ProfileRead, ProfileUpdate

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileRead)
async def get_profile(
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> ProfileRead:
    profile = await container.profiles.get_profile(session, uid=owner_id)
    return ProfileRead.from_model(profile)


@router.put("", response_model=ProfileRead)
async def update_profile(
    payload: ProfileUpdate,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> ProfileRead:
    profile = await container.profiles.update_profile(session, uid=owner_id, update=payload)
    return ProfileRead.from_model(profile)


@router.put("/notifications", response_model=ProfileRead)
async def update_notifications(
    payload: NotificationSettings,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> ProfileRead:
    profile = await container.profiles.update_notifications(
        session,
        uid=owner_id,
        notifications=payload.notifications,
    )
    return ProfileRead.from_model(profile)


@router.delete("")
async def delete_account(
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, object]:
    """Remove the caller's profile data."""

    await container.profiles.delete_profile(session, uid=owner_id)
    return {"success": True, "message": "Account data cleaned up."}
