"""Shared fixtures: temporary database, local storage and fake remote clients."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import AsyncIterator, Callable

import httpx
import pytest
import pytest_asyncio
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.ai.schemas import (
    ClothingAnalysis,
    SuggestionRequest,
    SuggestionResponse,
)
from outfitter.config.settings import Settings, get_settings
from outfitter.db import models
from outfitter.db.session import Database
from outfitter.services.errors import GenerationFailedError
from outfitter.services.outfits import OutfitService
from outfitter.services.planner import PlannerService
from outfitter.services.profiles import ProfileService
from outfitter.services.wardrobe import WardrobeService
from outfitter.storage.backend import LocalStorage


def _png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", (2, 2), (200, 30, 30, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


PNG_BYTES = _png_bytes()


class FakeSuggestionClient:
    """Records requests and replays a canned response."""

    def __init__(self) -> None:
        self.requests: list[SuggestionRequest] = []
        self.response: SuggestionResponse | None = None
        self.closed = False

    async def suggest(self, request: SuggestionRequest) -> SuggestionResponse:
        self.requests.append(request)
        if self.response is None:
            raise GenerationFailedError()
        return self.response

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True


class FakePhotoAnalyzer:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.result = ClothingAnalysis(
            type="shirt",
            color="white",
            texture="cotton",
            brand=None,
            fit="regular",
            season="all",
        )

    async def analyze(self, photo_data_uri: str) -> ClothingAnalysis:
        self.calls.append(photo_data_uri)
        return self.result

    async def close(self) -> None:
        return None


class FakeBackgroundClient:
    def __init__(self) -> None:
        self.calls: list[bytes] = []

    async def remove_background(self, image_bytes: bytes) -> bytes:
        self.calls.append(image_bytes)
        return PNG_BYTES

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


def suggestion_response(*outfits: list[tuple[str, str]]) -> SuggestionResponse:
    """Build a three-outfit response from (type, color) lists."""

    return SuggestionResponse.model_validate(
        {
            "outfits": [
                {
                    "name": f"Look {index}",
                    "description": "Easy weekend look.",
                    "category": "Casual",
                    "items_used": [{"type": type_, "color": color} for type_, color in items],
                }
                for index, items in enumerate(outfits, start=1)
            ],
        },
    )


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("IDENTITY_GATEWAY_TOKEN", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        media_root=str(tmp_path / "media"),
        media_signing_key="test-secret",
        openai_api_key="test-key",
    )


@pytest.fixture
def storage(settings: Settings) -> LocalStorage:
    return LocalStorage(Path(settings.media_root), signing_key=settings.media_signing_key)


@pytest.fixture
def suggestion_client() -> FakeSuggestionClient:
    return FakeSuggestionClient()


@pytest.fixture
def photo_analyzer() -> FakePhotoAnalyzer:
    return FakePhotoAnalyzer()


@pytest.fixture
def background_client() -> FakeBackgroundClient:
    return FakeBackgroundClient()


@pytest.fixture
def http_client() -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    db = Database(settings.database_url)
    await db.init_db()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.session_factory() as db_session:
        yield db_session


@pytest.fixture
def wardrobe_service(
    storage: LocalStorage,
    photo_analyzer: FakePhotoAnalyzer,
    http_client: httpx.AsyncClient,
) -> WardrobeService:
    return WardrobeService(storage, photo_analyzer, http_client)  # type: ignore[arg-type]


@pytest.fixture
def outfit_service(
    wardrobe_service: WardrobeService,
    suggestion_client: FakeSuggestionClient,
) -> OutfitService:
    return OutfitService(wardrobe_service, suggestion_client)  # type: ignore[arg-type]


@pytest.fixture
def planner_service() -> PlannerService:
    return PlannerService()


@pytest.fixture
def profile_service() -> ProfileService:
    return ProfileService()


@pytest.fixture
def make_item(session: AsyncSession) -> Callable[..., object]:
    """Return a coroutine factory inserting one clothing item."""

    async def _make_item(
        owner_id: str | None,
        type_: str,
        color: str,
        *,
        season: str = "all",
        storage_path: str = "",
    ) -> models.ClothingItem:
        item = models.ClothingItem(
            owner_id=owner_id,
            photo_url="",
            storage_path=storage_path,
            type=type_,
            color=color,
            texture="cotton",
            brand="Unknown",
            fit="regular",
            season=season,
        )
        session.add(item)
        await session.commit()
        return item

    return _make_item
