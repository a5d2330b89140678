"""Clothing photo analysis through a vision-capable chat model."""

from __future__ import annotations

import json
import logging

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError as SchemaValidationError

from outfitter.ai.prompt_builder import PromptBuilder
from outfitter.ai.schemas import ClothingAnalysis
from outfitter.config.settings import Settings, get_settings
from outfitter.services.errors import RemoteServiceError, ValidationError

logger = logging.getLogger(__name__)


class PhotoAnalyzer:
    """Extracts clothing attributes from a photo data URI."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: AsyncOpenAI | None = None,
    ) -> None:
        settings = settings or get_settings()
        if client is None and not settings.openai_api_key:
            raise RuntimeError("OpenAI API key is not configured.")

        self._settings = settings
        self._prompt_builder = PromptBuilder()
        self._client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url.rstrip("/"),
            timeout=settings.ai_request_timeout,
            max_retries=0,
        )

    async def analyze(self, photo_data_uri: str) -> ClothingAnalysis:
        """Return structured attributes for the photographed item."""

        if not photo_data_uri:
            raise ValidationError("No photo data provided.")

        try:
            response = await self._client.chat.completions.create(
                model=self._settings.analysis_model,
                messages=self._prompt_builder.analysis_messages(photo_data_uri),
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            logger.error("Photo analysis request failed: %s", exc)
            raise RemoteServiceError(f"AI analysis failed: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        try:
            return ClothingAnalysis.model_validate(json.loads(content or ""))
        except (json.JSONDecodeError, SchemaValidationError) as exc:
            logger.error("Invalid photo analysis payload: %s", content)
            raise RemoteServiceError("AI analysis failed: malformed response.") from exc

    async def close(self) -> None:
        """Release HTTP resources."""

        await self._client.close()
