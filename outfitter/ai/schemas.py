"""Request and response schemas exchanged with the generative models."""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

OutfitCategory = Literal[
    "Casual",
    "Business Casual",
    "Activewear",
    "Loungewear",
    "Night Out",
    "Smart Casual",
    "Vacation",
    "Seasonal",
    "Special Occasion",
    "Formal",
]

OUTFIT_CATEGORIES: tuple[str, ...] = get_args(OutfitCategory)

Season = Literal["summer", "winter", "spring", "fall", "all"]

NO_REQUIREMENTS = "No specific requirements."
SUGGESTION_COUNT = 3


class SuggestionItem(BaseModel):
    """Inventory item as shown to the model, without its identifier."""

    model_config = ConfigDict(extra="forbid")

    type: str
    color: str
    texture: str
    brand: str = "Unknown"
    fit: str
    season: Season


class ExistingOutfit(BaseModel):
    """Previously saved outfit, described by item attributes."""

    name: str
    items: list[str] = Field(default_factory=list)


class SuggestionRequest(BaseModel):
    """Input of the outfit suggestion call."""

    clothing_items: list[SuggestionItem]
    style_preferences: str
    outfit_requirements: str = NO_REQUIREMENTS
    existing_outfits: list[ExistingOutfit] = Field(default_factory=list)
    unused_item_priority: float = Field(0.6, ge=0.0, le=1.0)


class ItemReference(BaseModel):
    """Generic reference to an inventory item by its attributes."""

    model_config = ConfigDict(extra="forbid")

    type: str
    color: str


class CandidateOutfit(BaseModel):
    """Outfit proposed by the model, not yet reconciled to identifiers."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str
    category: OutfitCategory
    items_used: list[ItemReference]


class SuggestionResponse(BaseModel):
    """Validated output of the outfit suggestion call."""

    model_config = ConfigDict(extra="forbid")

    outfits: list[CandidateOutfit] = Field(
        min_length=SUGGESTION_COUNT,
        max_length=SUGGESTION_COUNT,
    )


class ClothingAnalysis(BaseModel):
    """Attributes extracted from a clothing photo."""

    type: str = Field(min_length=1)
    color: str = Field(min_length=1)
    texture: str = Field(min_length=1)
    brand: str | None = None
    fit: str = Field(min_length=1)
    season: Season
