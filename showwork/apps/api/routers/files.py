"""Media upload and serving endpoints."""

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import BaseModel

from core.auth import ViewerContext, require_viewer
from core.exceptions import ResourceNotFoundError
from core.logging import get_logger
from services.storage_service import StorageProvider, get_storage_provider, upload_image

router = APIRouter()
logger = get_logger(__name__)

MEDIA_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


class ImageUploadResponse(BaseModel):
    url: str


@router.post(
    "/images", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED
)
async def upload(
    file: UploadFile = File(...),
    viewer: ViewerContext = Depends(require_viewer),
    storage: StorageProvider = Depends(get_storage_provider),
):
    """
    Upload a cover image or avatar.

    JPEG, PNG, GIF and WebP only; the returned URL can be stored in
    `cover_image_url` or `avatar_url`.
    """
    content = await file.read()
    url = await upload_image(storage, viewer.profile_id, content, file.content_type)
    logger.info("image_uploaded", profile_id=str(viewer.profile_id), size=len(content))
    return ImageUploadResponse(url=url)


@router.get("/media/{path:path}")
async def get_media(
    path: str,
    storage: StorageProvider = Depends(get_storage_provider),
):
    """Serve a stored image. Media URLs are public."""
    file_path = await storage.get_file_path(path)
    if file_path is None:
        raise ResourceNotFoundError("Media", path)

    extension = file_path.suffix.lstrip(".").lower()
    return FileResponse(
        path=str(file_path),
        media_type=MEDIA_TYPES.get(extension, "application/octet-stream"),
    )
