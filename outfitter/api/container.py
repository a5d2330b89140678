"""Process-wide service wiring."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx

from outfitter.ai.photo_analyzer import PhotoAnalyzer
from outfitter.ai.suggestion_client import SuggestionClient
from outfitter.config.settings import Settings
from outfitter.db.session import Database
from outfitter.imgproc.background import BackgroundRemovalClient
from outfitter.services.images import ImageService
from outfitter.services.outfits import OutfitService
from outfitter.services.planner import PlannerService
from outfitter.services.profiles import ProfileService
from outfitter.services.reconcile import MatchMode
from outfitter.services.wardrobe import WardrobeService
from outfitter.storage.backend import LocalStorage, StorageBackend


@dataclass(slots=True)
class ServiceContainer:
    """Clients and services created once and shared by all requests."""

    database: Database
    storage: StorageBackend
    wardrobe: WardrobeService
    outfits: OutfitService
    planner: PlannerService
    profiles: ProfileService
    images: ImageService
    suggestion_client: SuggestionClient
    photo_analyzer: PhotoAnalyzer
    background_client: BackgroundRemovalClient
    http_client: httpx.AsyncClient

    async def close(self) -> None:
        """Release HTTP sessions and database connections."""

        await self.suggestion_client.close()
        await self.photo_analyzer.close()
        await self.background_client.close()
        await self.http_client.aclose()
        await self.database.dispose()


def build_container(
    settings: Settings,
    *,
    database: Database | None = None,
    storage: StorageBackend | None = None,
    suggestion_client: SuggestionClient | None = None,
    photo_analyzer: PhotoAnalyzer | None = None,
    background_client: BackgroundRemovalClient | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ServiceContainer:
    """Construct every service from ``settings``, accepting ready-made overrides."""

    database = database or Database(settings.database_url)
    storage = storage or LocalStorage(
        Path(settings.media_root),
        base_url=settings.media_base_url,
        signing_key=settings.media_signing_key,
        url_ttl_days=settings.media_url_ttl_days,
    )
    suggestion_client = suggestion_client or SuggestionClient(settings)
    photo_analyzer = photo_analyzer or PhotoAnalyzer(settings)
    background_client = background_client or BackgroundRemovalClient(settings)
    http_client = http_client or httpx.AsyncClient(timeout=settings.ai_request_timeout)

    wardrobe = WardrobeService(
        storage,
        photo_analyzer,
        http_client,
        catalog_prefix=settings.public_catalog_prefix,
    )
    outfits = OutfitService(
        wardrobe,
        suggestion_client,
        match_mode=MatchMode(settings.reconcile_mode),
        default_unused_priority=settings.unused_item_priority_default,
    )
    return ServiceContainer(
        database=database,
        storage=storage,
        wardrobe=wardrobe,
        outfits=outfits,
        planner=PlannerService(),
        profiles=ProfileService(),
        images=ImageService(
            storage,
            background_client,
            catalog_prefix=settings.public_catalog_prefix,
        ),
        suggestion_client=suggestion_client,
        photo_analyzer=photo_analyzer,
        background_client=background_client,
        http_client=http_client,
    )
