"""Image processing, catalog and signed media routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from outfitter.api.auth import OwnerDependency
from outfitter.api.container import ServiceContainer
from outfitter.api.deps import get_container
from outfitter.schemas import PhotoPayload, StoredImage
from outfitter.storage.backend import BlobNotFoundError, StorageError

router = APIRouter(tags=["images"])


@router.post("/images/remove-background", response_model=StoredImage)
async def remove_background(
    payload: PhotoPayload,
    owner_id: str | None = OwnerDependency,
    container: ServiceContainer = Depends(get_container),
) -> StoredImage:
    return await container.images.remove_background(
        owner_id=owner_id,
        photo_data_uri=payload.photo_data_uri,
    )


@router.get("/catalog/folders", response_model=list[str])
async def catalog_folders(container: ServiceContainer = Depends(get_container)) -> list[str]:
    return await container.images.catalog_folders()


@router.get("/catalog/folders/{folder}/images", response_model=list[StoredImage])
async def catalog_images(
    folder: str,
    container: ServiceContainer = Depends(get_container),
) -> list[StoredImage]:
    return await container.images.catalog_images(folder)


@router.get("/media/{key:path}")
async def read_media(
    key: str,
    expires: int = Query(...),
    signature: str = Query(...),
    container: ServiceContainer = Depends(get_container),
) -> Response:
    """Serve a stored object to holders of a valid signed URL."""

    if not container.storage.verify_signature(key, expires, signature):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid signature.")
    try:
        data, content_type = await container.storage.read(key)
    except (BlobNotFoundError, StorageError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found.") from exc
    return Response(content=data, media_type=content_type)
