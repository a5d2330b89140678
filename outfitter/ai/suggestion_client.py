"""Client for outfit suggestions via the configured LLM provider."""

from __future__ import annotations

import json
import logging

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError as SchemaValidationError

from outfitter.ai.prompt_builder import PromptBuilder
from outfitter.ai.schemas import SuggestionRequest, SuggestionResponse
from outfitter.config.settings import Settings, get_settings
from outfitter.services.errors import GenerationFailedError

logger = logging.getLogger(__name__)


class SuggestionClient:
    """Thin client that asks an OpenAI-compatible chat model for outfit candidates."""

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

    async def suggest(self, request: SuggestionRequest) -> SuggestionResponse:
        """Return exactly three validated candidates or raise :class:`GenerationFailedError`."""

        try:
            response = await self._client.chat.completions.create(
                model=self._settings.suggestion_model,
                messages=self._prompt_builder.suggestion_messages(request),
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            logger.error("Outfit suggestion request failed: %s", exc)
            raise GenerationFailedError() from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            logger.error("Outfit suggestion response was empty")
            raise GenerationFailedError()

        try:
            return SuggestionResponse.model_validate(json.loads(content))
        except json.JSONDecodeError as exc:
            logger.error("Failed to parse suggestion JSON: %s", content)
            raise GenerationFailedError() from exc
        except SchemaValidationError as exc:
            logger.error("Suggestion payload does not match schema: %s", exc)
            raise GenerationFailedError() from exc

    async def ping(self) -> bool:
        """Return ``True`` if the upstream service responds to a model listing call."""

        models = await self._client.models.list()
        return bool(models.data)

    async def close(self) -> None:
        """Release HTTP resources."""

        await self._client.close()
