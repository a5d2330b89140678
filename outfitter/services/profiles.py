"""User profile storage and preference mapping."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.db import models
from outfitter.schemas import Notifications, ProfileUpdate
from outfitter.services.wardrobe import require_owner

logger = logging.getLogger(__name__)

UNUSED_ITEM_WEIGHTS = {
    "low": 0.3,
    "medium": 0.6,
    "high": 0.9,
}


def unused_item_weight(profile: models.UserProfile) -> float:
    """Map the profile's low/medium/high preference to a novelty weight."""

    return UNUSED_ITEM_WEIGHTS.get(profile.unused_item_preference, UNUSED_ITEM_WEIGHTS["medium"])


class ProfileService:
    """Reads and edits the caller's profile, creating it on first access."""

    async def find_profile(
        self,
        session: AsyncSession,
        *,
        uid: str | None,
    ) -> models.UserProfile | None:
        """Return the stored profile without creating one."""

        if not uid:
            return None
        return await session.get(models.UserProfile, uid)

    async def get_profile(
        self,
        session: AsyncSession,
        *,
        uid: str | None,
    ) -> models.UserProfile:
        uid = require_owner(uid)
        profile = await session.get(models.UserProfile, uid)
        if profile is not None:
            return profile

        profile = models.UserProfile(
            uid=uid,
            language="en",
            gender_preference="unisex",
            unit_preference="metric",
            unused_item_preference="medium",
            style_preferences=[],
            color_preferences=[],
            notify_email=True,
            notify_app_alerts=True,
        )
        session.add(profile)
        await session.commit()
        logger.info("Created default profile for user %s", uid)
        return profile

    async def update_profile(
        self,
        session: AsyncSession,
        *,
        uid: str | None,
        update: ProfileUpdate,
    ) -> models.UserProfile:
        """Merge validated form fields into the stored profile."""

        profile = await self.get_profile(session, uid=uid)
        fields = update.model_fields_set

        profile.gender_preference = update.gender_preference
        for name in (
            "display_name",
            "email",
            "color_preferences",
            "unused_item_preference",
            "unit_preference",
            "style_preferences",
        ):
            value = getattr(update, name)
            if name in fields and value is not None:
                setattr(profile, name, value)
        for name in ("age", "weight", "body_type"):
            if name in fields:
                setattr(profile, name, getattr(update, name))

        if update.unit_preference == "imperial":
            feet = update.feet or 0
            inches = update.inches or 0
            profile.height = feet * 12 + inches if feet > 0 or inches > 0 else None
        elif "height" in fields:
            profile.height = update.height

        await session.commit()
        logger.info("Profile update for %s successful", profile.uid)
        return profile

    async def update_notifications(
        self,
        session: AsyncSession,
        *,
        uid: str | None,
        notifications: Notifications,
    ) -> models.UserProfile:
        profile = await self.get_profile(session, uid=uid)
        profile.notify_email = notifications.email
        profile.notify_app_alerts = notifications.app_alerts
        await session.commit()
        return profile

    async def delete_profile(
        self,
        session: AsyncSession,
        *,
        uid: str | None,
    ) -> None:
        """Remove the profile record; a missing profile is not an error."""

        uid = require_owner(uid)
        profile = await session.get(models.UserProfile, uid)
        if profile is None:
            logger.warning("Profile %s already removed", uid)
            return
        await session.delete(profile)
        await session.commit()
