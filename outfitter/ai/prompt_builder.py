"""Prompt construction for outfit suggestion and photo analysis."""

from __future__ import annotations

import json
from typing import Any

from outfitter.ai.schemas import OUTFIT_CATEGORIES, SUGGESTION_COUNT, SuggestionRequest

SUGGESTION_SYSTEM_PROMPT = (
    "You are a personal stylist helping users create outfits from their existing wardrobe. "
    f"Based on the user's clothing items and preferences, generate {SUGGESTION_COUNT} distinct "
    "outfit suggestions. For each outfit provide a unique short name, a compelling description, "
    "the list of items used and one category from: " + ", ".join(OUTFIT_CATEGORIES) + ". "
    "Follow these outfit best practices: "
    "ensure the outfit is appropriate for a single season, items marked 'all' can be used in any "
    "season; combine colors and textures that complement each other; consider the fit of the "
    "items to create a balanced silhouette; aim to use a diverse range of items. "
    "'unused_item_priority' is on a scale from 0 to 1: the higher it is, the more you should use "
    "items that do not appear in 'existing_outfits'. "
    "Only use items from 'clothing_items' and copy their 'type' and 'color' values exactly. "
    'Reply ONLY with a JSON object: {"outfits": [{"name": str, "description": str, '
    '"category": str, "items_used": [{"type": str, "color": str}]}]}. '
    "Do not add other fields and do not use Markdown."
)

ANALYSIS_SYSTEM_PROMPT = (
    "You are a fashion cataloguing assistant. Look at the clothing item in the photo and describe it. "
    'Reply ONLY with a JSON object: {"type": str, "color": str, "texture": str, "brand": str | null, '
    '"fit": str, "season": "summer" | "winter" | "spring" | "fall" | "all"}. '
    "Use lowercase single words where possible, list several shades as a comma separated string "
    "with the dominant one first, and use null for brand when no logo or label is visible."
)


class PromptBuilder:
    """Builds chat messages for the generative model calls."""

    def suggestion_messages(self, request: SuggestionRequest) -> list[dict[str, Any]]:
        """Return messages asking for outfit candidates for ``request``."""

        user_prompt = {
            "style_preferences": request.style_preferences,
            "outfit_requirements": request.outfit_requirements,
            "unused_item_priority": request.unused_item_priority,
            "existing_outfits": [outfit.model_dump() for outfit in request.existing_outfits]
            or "No existing outfits provided.",
            "clothing_items": [item.model_dump() for item in request.clothing_items],
        }
        return [
            {"role": "system", "content": SUGGESTION_SYSTEM_PROMPT},
            {"role": "user", "content": json.dumps(user_prompt, ensure_ascii=False)},
        ]

    def analysis_messages(self, photo_data_uri: str) -> list[dict[str, Any]]:
        """Return messages asking the model to describe a clothing photo."""

        return [
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Describe this clothing item."},
                    {"type": "image_url", "image_url": {"url": photo_data_uri}},
                ],
            },
        ]
