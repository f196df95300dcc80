"""Upload router - image uploads for posts and avatars."""

from os import SEEK_END
from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from family_sns.core.config import settings
from family_sns.core.deps import get_current_session
from family_sns.core.exceptions import InvalidUpload
from family_sns.schemas.auth import UserSession
from family_sns.services import media_service

router = APIRouter(prefix="/upload", tags=["Upload"])

# Room for multipart boundaries and headers around the image itself
FORM_OVERHEAD_BYTES = 64 * 1024


def _declared_body_too_large(request: Request) -> bool:
    try:
        declared = int(request.headers.get("content-length", ""))
    except ValueError:
        return False
    return declared > settings.MAX_UPLOAD_BYTES + FORM_OVERHEAD_BYTES


def _spooled_size(image: UploadFile) -> int:
    stream = image.file
    stream.seek(0, SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def _store(image: UploadFile) -> media_service.StoredImage:
    return media_service.store_image(
        image.filename,
        image.content_type,
        image.file,
        _spooled_size(image),
    )


@router.post("/image")
async def upload_image(
    request: Request,
    image: Annotated[UploadFile | None, File()] = None,
    session: UserSession = Depends(get_current_session),
):
    """
    Store an image and return the URL it is served from.

    The form field is ``image``; only image/* up to MAX_UPLOAD_BYTES.
    """
    if _declared_body_too_large(request):
        raise media_service.file_too_large()

    if image is None:
        raise InvalidUpload("An image file is required")

    stored = await run_in_threadpool(_store, image)
    return {
        "message": "Image uploaded successfully",
        "image_url": stored.url,
        "filename": stored.filename,
    }
