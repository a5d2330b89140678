"""Async client for the remote background-removal service."""

from __future__ import annotations

import logging

import httpx

from outfitter.config.settings import Settings, get_settings
from outfitter.imgproc.normalize import image_as_png
from outfitter.services.errors import RemoteServiceError

logger = logging.getLogger(__name__)


class BackgroundRemovalClient:
    """Posts images to the background-removal endpoint and returns the processed bytes."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._url = settings.background_removal_url
        self._client = client or httpx.AsyncClient(timeout=settings.background_removal_timeout)

    async def remove_background(self, image_bytes: bytes) -> bytes:
        """Return a PNG of ``image_bytes`` with the background removed."""

        png_bytes = image_as_png(image_bytes)
        files = [("file", ("image.png", png_bytes, "image/png"))]
        try:
            response = await self._client.post(self._url, files=files)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("Background removal timed out")
            raise RemoteServiceError("Background removal timed out.") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Background removal API failed: %s %s",
                exc.response.status_code,
                exc.response.text,
            )
            raise RemoteServiceError(
                f"Background removal API failed with status: {exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Background removal request failed: %s", exc)
            raise RemoteServiceError("Background removal request failed.") from exc

        if not response.content:
            raise RemoteServiceError("Background removal API returned an empty body.")
        return response.content

    async def ping(self) -> bool:
        """Return ``True`` when the service host answers without a server error."""

        response = await self._client.get(self._url)
        return response.status_code < 500

    async def close(self) -> None:
        """Close the underlying HTTP session."""

        await self._client.aclose()
