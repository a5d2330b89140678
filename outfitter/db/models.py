"""SQLAlchemy models describing the wardrobe collections."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Return an opaque identifier for a new document."""

    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Base class for ORM models."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )


class ClothingItem(Base):
    """Clothing item owned by a user, or shared when ``owner_id`` is null."""

    __tablename__ = "wardrobe"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    owner_id: Mapped[str | None] = mapped_column(String(128), index=True, nullable=True)
    photo_url: Mapped[str] = mapped_column(Text, default="")
    storage_path: Mapped[str] = mapped_column(String(512), default="")
    type: Mapped[str] = mapped_column(String(64))
    color: Mapped[str] = mapped_column(String(128))
    texture: Mapped[str] = mapped_column(String(64))
    brand: Mapped[str] = mapped_column(String(128), default="Unknown")
    fit: Mapped[str] = mapped_column(String(64))
    season: Mapped[str] = mapped_column(String(16))

    @property
    def is_public(self) -> bool:
        return self.owner_id is None

    @property
    def canonical_color(self) -> str:
        """First shade of a comma separated colour list."""

        return self.color.split(",")[0].strip()


class OutfitItem(Base):
    """Membership of an item in an outfit."""

    __tablename__ = "outfit_items"

    outfit_id: Mapped[str] = mapped_column(
        ForeignKey("outfits.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Not a foreign key: references may dangle until the next scrub.
    item_id: Mapped[str] = mapped_column(String(32), primary_key=True, index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    outfit: Mapped["Outfit"] = relationship(back_populates="members")


class Outfit(Base):
    """Named set of clothing items belonging to one owner."""

    __tablename__ = "outfits"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(128))
    description: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(String(32))
    item_layouts: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    members: Mapped[list[OutfitItem]] = relationship(
        back_populates="outfit",
        cascade="all, delete-orphan",
        order_by=OutfitItem.position,
        lazy="selectin",
    )

    @property
    def item_ids(self) -> list[str]:
        return [member.item_id for member in self.members]

    def set_item_ids(self, item_ids: list[str]) -> None:
        """Replace membership, keeping rows for items that stay in the outfit."""

        wanted = list(dict.fromkeys(item_ids))
        keep = set(wanted)
        existing = {member.item_id: member for member in self.members}
        self.members[:] = [member for member in self.members if member.item_id in keep]
        for position, item_id in enumerate(wanted):
            member = existing.get(item_id)
            if member is None:
                member = OutfitItem(item_id=item_id)
                self.members.append(member)
            member.position = position
        self.members.sort(key=lambda member: member.position)


class PlannerOutfit(Base):
    """Outfit scheduled inside a planner entry."""

    __tablename__ = "planner_outfits"

    entry_id: Mapped[int] = mapped_column(
        ForeignKey("planner.id", ondelete="CASCADE"),
        primary_key=True,
    )
    outfit_id: Mapped[str] = mapped_column(String(32), primary_key=True, index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    entry: Mapped["PlannerEntry"] = relationship(back_populates="scheduled")


class PlannerEntry(Base):
    """Outfits planned by one owner for one calendar date."""

    __tablename__ = "planner"
    __table_args__ = (UniqueConstraint("owner_id", "date", name="uq_planner_owner_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    date: Mapped[str] = mapped_column(String(10))

    scheduled: Mapped[list[PlannerOutfit]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by=PlannerOutfit.position,
        lazy="selectin",
    )

    @property
    def outfit_ids(self) -> list[str]:
        return [row.outfit_id for row in self.scheduled]

    def set_outfit_ids(self, outfit_ids: list[str]) -> None:
        """Replace scheduled outfits, keeping rows that stay scheduled."""

        wanted = list(dict.fromkeys(outfit_ids))
        keep = set(wanted)
        existing = {row.outfit_id: row for row in self.scheduled}
        self.scheduled[:] = [row for row in self.scheduled if row.outfit_id in keep]
        for position, outfit_id in enumerate(wanted):
            row = existing.get(outfit_id)
            if row is None:
                row = PlannerOutfit(outfit_id=outfit_id)
                self.scheduled.append(row)
            row.position = position
        self.scheduled.sort(key=lambda row: row.position)


class UserProfile(Base):
    """Preferences and display attributes of a signed-in user."""

    __tablename__ = "profiles"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(128))
    email: Mapped[str | None] = mapped_column(String(256))
    language: Mapped[str] = mapped_column(String(10), default="en")
    gender_preference: Mapped[str] = mapped_column(String(16), default="unisex")
    unit_preference: Mapped[str] = mapped_column(String(16), default="metric")
    unused_item_preference: Mapped[str] = mapped_column(String(16), default="medium")
    style_preferences: Mapped[list[str]] = mapped_column(JSON, default=list)
    color_preferences: Mapped[list[str]] = mapped_column(JSON, default=list)
    notify_email: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_app_alerts: Mapped[bool] = mapped_column(Boolean, default=True)
    age: Mapped[int | None] = mapped_column(Integer)
    height: Mapped[float | None] = mapped_column(Float)
    weight: Mapped[float | None] = mapped_column(Float)
    body_type: Mapped[str | None] = mapped_column(String(64))
