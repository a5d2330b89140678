"""Outfit persistence and AI-assisted outfit composition."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.ai.schemas import (
    NO_REQUIREMENTS,
    OUTFIT_CATEGORIES,
    ExistingOutfit,
    SuggestionItem,
    SuggestionRequest,
)
from outfitter.ai.suggestion_client import SuggestionClient
from outfitter.db import models
from outfitter.metrics.prometheus_exporter import (
    outfit_generation_failures_total,
    outfit_generation_total,
    reconciled_items,
)
from outfitter.schemas import ItemLayout, OutfitDraft, OutfitSuggestion, OutfitUpdate
from outfitter.services.errors import (
    AuthorizationError,
    GenerationFailedError,
    NotFoundError,
    ValidationError,
)
from outfitter.services.reconcile import MatchMode, reconcile_items
from outfitter.services.wardrobe import WardrobeService, require_owner

logger = logging.getLogger(__name__)

MIN_ITEMS_FOR_SUGGESTION = 2


def _layouts_to_json(layouts: dict[str, ItemLayout] | None) -> dict[str, Any] | None:
    if not layouts:
        return None
    return {item_id: layout.model_dump() for item_id, layout in layouts.items()}


class OutfitService:
    """Validates, stores and suggests outfits for a single owner."""

    def __init__(
        self,
        wardrobe_service: WardrobeService,
        suggestion_client: SuggestionClient,
        *,
        match_mode: MatchMode = MatchMode.EXACT,
        default_unused_priority: float = 0.6,
    ) -> None:
        self._wardrobe_service = wardrobe_service
        self._suggestion_client = suggestion_client
        self._match_mode = match_mode
        self._default_unused_priority = default_unused_priority

    async def list_outfits(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
    ) -> list[models.Outfit]:
        """Return all outfits of the caller."""

        owner_id = require_owner(owner_id)
        stmt = (
            select(models.Outfit)
            .where(models.Outfit.owner_id == owner_id)
            .order_by(models.Outfit.created_at, models.Outfit.id)
        )
        return list((await session.scalars(stmt)).all())

    async def get_outfit(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        outfit_id: str,
    ) -> models.Outfit:
        owner_id = require_owner(owner_id)
        outfit = await session.get(models.Outfit, outfit_id)
        if outfit is None:
            raise NotFoundError("Outfit not found.")
        if outfit.owner_id != owner_id:
            raise AuthorizationError("You are not authorized to view this outfit.")
        return outfit

    def _validate(self, draft: OutfitDraft) -> None:
        if not draft.name.strip() or not draft.category or not draft.item_ids:
            raise ValidationError("Outfit name, category, and at least one item are required.")
        if draft.category not in OUTFIT_CATEGORIES:
            raise ValidationError(f"Unknown outfit category: {draft.category}.")

    async def _check_item_access(
        self,
        session: AsyncSession,
        *,
        owner_id: str,
        item_ids: Sequence[str],
    ) -> None:
        """Reject items that exist but belong to somebody else."""

        stmt = select(models.ClothingItem.id).where(
            models.ClothingItem.id.in_(list(item_ids)),
            models.ClothingItem.owner_id.is_not(None),
            models.ClothingItem.owner_id != owner_id,
        )
        foreign = list((await session.scalars(stmt)).all())
        if foreign:
            raise AuthorizationError(
                f"You are not authorized to use item {foreign[0]} in an outfit.",
            )

    async def create_outfit(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        draft: OutfitDraft,
    ) -> models.Outfit:
        """Validate and store a new outfit."""

        owner_id = require_owner(owner_id)
        self._validate(draft)
        await self._check_item_access(session, owner_id=owner_id, item_ids=draft.item_ids)

        outfit = models.Outfit(
            owner_id=owner_id,
            name=draft.name.strip(),
            description=draft.description,
            category=draft.category,
            item_layouts=_layouts_to_json(draft.item_layouts),
        )
        outfit.set_item_ids(draft.item_ids)
        session.add(outfit)
        await session.commit()
        logger.info("Created outfit %s for user %s", outfit.id, owner_id)
        return outfit

    async def update_outfit(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        outfit_id: str,
        update: OutfitUpdate,
    ) -> models.Outfit:
        """Overwrite an owned outfit.

        The stored layout is only touched when ``item_layouts`` was present in
        the payload.
        """

        owner_id = require_owner(owner_id)
        self._validate(update)

        outfit = await session.get(models.Outfit, outfit_id)
        if outfit is None:
            raise NotFoundError("Outfit not found.")
        if outfit.owner_id != owner_id:
            raise AuthorizationError("You are not authorized to update this outfit.")
        await self._check_item_access(session, owner_id=owner_id, item_ids=update.item_ids)

        outfit.name = update.name.strip()
        outfit.description = update.description
        outfit.category = update.category
        outfit.set_item_ids(update.item_ids)
        if "item_layouts" in update.model_fields_set:
            outfit.item_layouts = _layouts_to_json(update.item_layouts)
        await session.commit()
        return outfit

    async def delete_outfit(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        outfit_id: str,
    ) -> None:
        """Delete an owned outfit and unschedule it from the planner."""

        owner_id = require_owner(owner_id)
        if not outfit_id:
            raise ValidationError("Outfit ID is required.")

        outfit = await session.get(models.Outfit, outfit_id)
        if outfit is None:
            logger.warning("Outfit with ID %s not found.", outfit_id)
            return
        if outfit.owner_id != owner_id:
            raise AuthorizationError("You are not authorized to delete this outfit.")

        await session.delete(outfit)
        await session.commit()

        await self.remove_outfit_references(session, owner_id=owner_id, outfit_id=outfit_id)
        logger.info("Deleted outfit %s for user %s", outfit_id, owner_id)

    async def remove_outfit_references(
        self,
        session: AsyncSession,
        *,
        owner_id: str,
        outfit_id: str,
    ) -> None:
        """Drop ``outfit_id`` from planner entries, deleting entries left empty."""

        stmt = select(models.PlannerEntry).where(
            models.PlannerEntry.owner_id == owner_id,
            models.PlannerEntry.scheduled.any(models.PlannerOutfit.outfit_id == outfit_id),
        )
        entries = list((await session.scalars(stmt)).all())
        if not entries:
            return

        for entry in entries:
            remaining = [other for other in entry.outfit_ids if other != outfit_id]
            if remaining:
                entry.set_outfit_ids(remaining)
            else:
                await session.delete(entry)
        await session.commit()

    async def generate_outfits(
        self,
        session: AsyncSession,
        *,
        owner_id: str | None,
        style_preferences: str,
        outfit_requirements: str = "",
        unused_item_priority: float | None = None,
    ) -> list[OutfitSuggestion]:
        """Ask the model for three outfits and ground them in the caller's inventory.

        Nothing is written; the caller saves the candidates it accepts.
        """

        owner_id = require_owner(owner_id)
        if not style_preferences or not style_preferences.strip():
            raise ValidationError("Style preferences are required.")

        inventory = await self._wardrobe_service.list_visible_items(session, owner_id=owner_id)
        if len(inventory) < MIN_ITEMS_FOR_SUGGESTION:
            raise ValidationError(
                "Not enough clothing items to generate an outfit. Add at least two.",
            )
        existing = await self.list_outfits(session, owner_id=owner_id)

        priority = (
            self._default_unused_priority if unused_item_priority is None else unused_item_priority
        )
        request = SuggestionRequest(
            clothing_items=[
                SuggestionItem(
                    type=item.type,
                    color=item.color,
                    texture=item.texture,
                    brand=item.brand or "Unknown",
                    fit=item.fit,
                    season=item.season,
                )
                for item in inventory
            ],
            style_preferences=style_preferences.strip(),
            outfit_requirements=outfit_requirements.strip() or NO_REQUIREMENTS,
            existing_outfits=self._describe_outfits(existing, inventory),
            unused_item_priority=priority,
        )
        outfit_generation_total.inc()
        try:
            response = await self._suggestion_client.suggest(request)
        except GenerationFailedError:
            outfit_generation_failures_total.inc()
            raise

        suggestions: list[OutfitSuggestion] = []
        for candidate in response.outfits:
            item_ids = reconcile_items(candidate.items_used, inventory, self._match_mode)
            reconciled_items.observe(len(item_ids))
            suggestions.append(
                OutfitSuggestion(
                    name=candidate.name,
                    description=candidate.description,
                    category=candidate.category,
                    item_ids=list(dict.fromkeys(item_ids)),
                ),
            )
        return suggestions

    @staticmethod
    def _describe_outfits(
        outfits: Sequence[models.Outfit],
        inventory: Sequence[models.ClothingItem],
    ) -> list[ExistingOutfit]:
        """Replace item ids with readable descriptions so the model never sees ids."""

        labels = {item.id: f"{item.type} ({item.color})" for item in inventory}
        return [
            ExistingOutfit(
                name=outfit.name,
                items=[labels[item_id] for item_id in outfit.item_ids if item_id in labels],
            )
            for outfit in outfits
        ]
