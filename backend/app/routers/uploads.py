"""Media upload route used by the wizards' media steps.

  POST /images  - multipart upload of one image → metadata with public URL
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from pydantic import BaseModel

from app.auth.deps import get_current_user
from app.models.user import User
from app.services.storage import read_upload, store_image

router = APIRouter()


class UploadedImage(BaseModel):
    id: str
    url: str
    filename: str
    size: int
    content_type: str


@router.post("/images", response_model=UploadedImage, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    folder: str = Query("images", pattern="^(images|aerial|documents|blog|avatars)$"),
    _user: User = Depends(get_current_user),
):
    content = await read_upload(file)
    stored = store_image(content, file.filename, folder=folder)
    return UploadedImage(
        id=stored.id,
        url=stored.url,
        filename=stored.filename,
        size=stored.size,
        content_type=stored.content_type,
    )
