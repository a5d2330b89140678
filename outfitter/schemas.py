"""Pydantic models shared by the services and the HTTP layer."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from outfitter.ai.schemas import Season
from outfitter.db import models

Gender = Literal["male", "female", "unisex"]
UnitSystem = Literal["metric", "imperial"]
UnusedItemPreference = Literal["low", "medium", "high"]


class ItemDraft(BaseModel):
    """Item to add; entries without metadata are analysed from their photo."""

    photo_url: str = Field(min_length=1)
    storage_path: str = Field(min_length=1)
    type: str | None = Field(default=None, min_length=1)
    color: str | None = Field(default=None, min_length=1)
    texture: str | None = Field(default=None, min_length=1)
    brand: str | None = None
    fit: str | None = Field(default=None, min_length=1)
    season: Season | None = None

    @property
    def has_metadata(self) -> bool:
        return all((self.type, self.color, self.texture, self.fit, self.season))


class ItemBatchCreate(BaseModel):
    items: list[ItemDraft] = Field(min_length=1)


class ItemUpdate(BaseModel):
    type: str = Field(min_length=1)
    color: str = Field(min_length=1)
    texture: str = Field(min_length=1)
    brand: str | None = None
    fit: str = Field(min_length=1)
    season: Season


class ItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str | None
    photo_url: str
    storage_path: str
    type: str
    color: str
    texture: str
    brand: str
    fit: str
    season: str


class ItemBatchDelete(BaseModel):
    item_ids: list[str]


class PhotoPayload(BaseModel):
    photo_data_uri: str


class ItemLayout(BaseModel):
    """Position of an item on the outfit canvas, in percent."""

    x: float
    y: float
    width: float
    height: float
    z_index: int


class OutfitDraft(BaseModel):
    name: str = ""
    description: str = ""
    category: str = ""
    item_ids: list[str] = Field(default_factory=list)
    item_layouts: dict[str, ItemLayout] | None = None


class OutfitUpdate(OutfitDraft):
    """Full outfit edit.

    ``item_layouts`` left out of the payload keeps the stored layout; sending
    ``null`` or ``{}`` clears it.
    """


class OutfitRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    description: str
    category: str
    item_ids: list[str]
    item_layouts: dict[str, ItemLayout] | None = None


class GenerateRequest(BaseModel):
    style_preferences: str
    outfit_requirements: str = ""


class OutfitSuggestion(BaseModel):
    """Reconciled candidate ready to be saved as an outfit."""

    name: str
    description: str
    category: str
    item_ids: list[str]


class GenerateResponse(BaseModel):
    outfits: list[OutfitSuggestion]


class PlannerUpdate(BaseModel):
    outfit_ids: list[str]


class PlannerEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    owner_id: str
    date: str
    outfit_ids: list[str]


class StoredImage(BaseModel):
    photo_url: str
    storage_path: str


class Notifications(BaseModel):
    email: bool = True
    app_alerts: bool = True


class NotificationSettings(BaseModel):
    notifications: Notifications


class ProfileRead(BaseModel):
    uid: str
    display_name: str | None = None
    email: str | None = None
    language: str = "en"
    gender_preference: Gender = "unisex"
    unit_preference: UnitSystem = "metric"
    unused_item_preference: UnusedItemPreference = "medium"
    style_preferences: list[str] = Field(default_factory=list)
    color_preferences: list[str] = Field(default_factory=list)
    notifications: Notifications = Field(default_factory=Notifications)
    age: int | None = None
    height: float | None = None
    weight: float | None = None
    body_type: str | None = None
    last_updated: datetime | None = None

    @classmethod
    def from_model(cls, profile: models.UserProfile) -> "ProfileRead":
        return cls(
            uid=profile.uid,
            display_name=profile.display_name,
            email=profile.email,
            language=profile.language,
            gender_preference=profile.gender_preference,
            unit_preference=profile.unit_preference,
            unused_item_preference=profile.unused_item_preference,
            style_preferences=list(profile.style_preferences or []),
            color_preferences=list(profile.color_preferences or []),
            notifications=Notifications(
                email=profile.notify_email,
                app_alerts=profile.notify_app_alerts,
            ),
            age=profile.age,
            height=profile.height,
            weight=profile.weight,
            body_type=profile.body_type,
            last_updated=profile.updated_at,
        )


class ProfileUpdate(BaseModel):
    """Profile form; blank numeric fields are treated as "not set"."""

    display_name: str | None = Field(default=None, min_length=2)
    email: EmailStr | None = None
    gender_preference: Gender
    age: int | None = Field(default=None, gt=0)
    weight: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    feet: float | None = Field(default=None, gt=0)
    inches: float | None = Field(default=None, ge=0, le=11)
    body_type: str | None = None
    color_preferences: list[str] | None = None
    unused_item_preference: UnusedItemPreference | None = None
    unit_preference: UnitSystem | None = None
    style_preferences: list[str] | None = None

    @field_validator("age", "weight", "height", "feet", "inches", "body_type", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
