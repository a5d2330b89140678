"""Planner routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.api.auth import OwnerDependency
from outfitter.api.container import ServiceContainer
from outfitter.api.deps import get_container, get_session
from outfitter.schemas import PlannerEntryRead, PlannerUpdate

router = APIRouter(prefix="/planner", tags=["planner"])


@router.get("", response_model=list[PlannerEntryRead])
async def list_entries(
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> list[PlannerEntryRead]:
    entries = await container.planner.list_entries(session, owner_id=owner_id)
    return [PlannerEntryRead.model_validate(entry) for entry in entries]


@router.put("/{date}", response_model=PlannerEntryRead)
async def save_entry(
    date: str,
    payload: PlannerUpdate,
    owner_id: str | None = OwnerDependency,
    session: AsyncSession = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> PlannerEntryRead:
    """Replace the outfits planned for ``date``; an empty list clears the day."""

    entry = await container.planner.save_entry(
        session,
        owner_id=owner_id,
        date=date,
        outfit_ids=payload.outfit_ids,
    )
    if entry is None:
        return PlannerEntryRead(owner_id=owner_id or "", date=date, outfit_ids=[])
    return PlannerEntryRead.model_validate(entry)
