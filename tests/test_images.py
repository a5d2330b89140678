"""Tests for image decoding, background removal and catalog browsing."""

from __future__ import annotations

from io import BytesIO

import httpx
import pytest
from conftest import PNG_BYTES, FakeBackgroundClient
from PIL import Image

from outfitter.config.settings import Settings
from outfitter.imgproc.background import BackgroundRemovalClient
from outfitter.imgproc.normalize import decode_data_uri, image_as_png, to_data_uri
from outfitter.services.errors import RemoteServiceError, UnauthenticatedError, ValidationError
from outfitter.services.images import ImageService
from outfitter.storage.backend import LocalStorage


def test_decode_data_uri() -> None:
    image = decode_data_uri(to_data_uri(PNG_BYTES, "image/jpeg"))

    assert image.data == PNG_BYTES
    assert image.content_type == "image/jpeg"
    assert image.extension == "jpeg"


@pytest.mark.parametrize("uri", ["", "not a uri", "data:image/png;base64,@@@", "data:image/png;base64,"])
def test_decode_rejects_invalid_uris(uri: str) -> None:
    with pytest.raises(ValidationError):
        decode_data_uri(uri)


def test_image_as_png_converts_other_formats() -> None:
    buffer = BytesIO()
    Image.new("RGB", (3, 3), (0, 120, 0)).save(buffer, format="JPEG")

    converted = image_as_png(buffer.getvalue())

    with Image.open(BytesIO(converted)) as img:
        assert img.format == "PNG"
        assert img.mode == "RGBA"
    with pytest.raises(ValidationError):
        image_as_png(b"definitely not an image")


@pytest.mark.asyncio
async def test_background_client_posts_png(settings: Settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"processed")

    client = BackgroundRemovalClient(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    result = await client.remove_background(PNG_BYTES)
    await client.close()

    assert result == b"processed"
    assert str(seen[0].url) == settings.background_removal_url
    assert b'name="file"; filename="image.png"' in seen[0].content


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [httpx.Response(500, text="boom"), httpx.Response(200, content=b"")],
)
async def test_background_client_failures(settings: Settings, response: httpx.Response) -> None:
    client = BackgroundRemovalClient(
        settings,
        client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: response)),
    )

    with pytest.raises(RemoteServiceError):
        await client.remove_background(PNG_BYTES)


@pytest.mark.asyncio
async def test_background_client_timeout(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    client = BackgroundRemovalClient(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    with pytest.raises(RemoteServiceError, match="timed out"):
        await client.remove_background(PNG_BYTES)


@pytest.mark.asyncio
async def test_remove_background_stores_processed_png(
    storage: LocalStorage, background_client: FakeBackgroundClient
) -> None:
    service = ImageService(storage, background_client)  # type: ignore[arg-type]

    stored = await service.remove_background(
        owner_id="u1",
        photo_data_uri=to_data_uri(b"raw-photo", "image/jpeg"),
    )

    assert background_client.calls == [b"raw-photo"]
    assert stored.storage_path.startswith("processed-items/u1/")
    assert stored.storage_path.endswith(".png")
    assert (await storage.read(stored.storage_path))[0] == PNG_BYTES

    with pytest.raises(UnauthenticatedError):
        await service.remove_background(owner_id=None, photo_data_uri="data:image/png;base64,AAAA")
    with pytest.raises(ValidationError):
        await service.remove_background(owner_id="u1", photo_data_uri="")


@pytest.mark.asyncio
async def test_catalog_browsing(storage: LocalStorage, background_client: FakeBackgroundClient) -> None:
    await storage.save("Public-Catalog/Tops/tee.png", PNG_BYTES)
    await storage.save("Public-Catalog/Shoes/boot.png", PNG_BYTES)
    service = ImageService(storage, background_client)  # type: ignore[arg-type]

    assert await service.catalog_folders() == ["Shoes", "Tops"]
    images = await service.catalog_images("Tops")
    assert [image.storage_path for image in images] == ["Public-Catalog/Tops/tee.png"]
    assert "signature=" in images[0].photo_url
    with pytest.raises(ValidationError):
        await service.catalog_images("..")
