"""Calendar planning of outfits."""

from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.db import models
from outfitter.services.errors import ValidationError
from outfitter.services.wardrobe import require_owner

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> str:
    try:
        return date_type.fromisoformat(value).isoformat()
    except (TypeError, ValueError) as exc:
        raise ValidationError("Date must use the YYYY-MM-DD format.") from exc


class PlannerService:
    """Maintains one planner entry per owner and date."""

    async def list_entries(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
    ) -> list[models.PlannerEntry]:
        if not owner_id:
            return []
        stmt = (
            select(models.PlannerEntry)
            .where(models.PlannerEntry.owner_id == owner_id)
            .order_by(models.PlannerEntry.date)
        )
        return list((await session.scalars(stmt)).all())

    async def save_entry(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        date: str,
        outfit_ids: Sequence[str],
    ) -> models.PlannerEntry | None:
        """Upsert the outfits planned for ``date``.

        An empty ``outfit_ids`` removes the entry. Returns the stored entry or
        ``None`` when no entry remains.
        """

        owner_id = require_owner(owner_id)
        day = _parse_date(date)
        wanted = list(dict.fromkeys(outfit_ids))
        if wanted:
            await self._check_outfits(session, owner_id=owner_id, outfit_ids=wanted)

        stmt = select(models.PlannerEntry).where(
            models.PlannerEntry.owner_id == owner_id,
            models.PlannerEntry.date == day,
        )
        entry = (await session.scalars(stmt)).first()

        if entry is None:
            if not wanted:
                return None
            entry = models.PlannerEntry(owner_id=owner_id, date=day)
            entry.set_outfit_ids(wanted)
            session.add(entry)
        elif wanted:
            entry.set_outfit_ids(wanted)
        else:
            await session.delete(entry)
            await session.commit()
            logger.info("Cleared planner entry %s for user %s", day, owner_id)
            return None

        await session.commit()
        return entry

    async def _check_outfits(
        self,
        session: AsyncSession,
        *,
        owner_id: str,
        outfit_ids: Sequence[str],
    ) -> None:
        stmt = select(models.Outfit.id).where(
            models.Outfit.id.in_(list(outfit_ids)),
            models.Outfit.owner_id == owner_id,
        )
        known = set((await session.scalars(stmt)).all())
        unknown = [outfit_id for outfit_id in outfit_ids if outfit_id not in known]
        if unknown:
            raise ValidationError(f"Unknown outfit: {unknown[0]}.")
