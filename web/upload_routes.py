"""
Multipart media uploads.

The file goes to the media host and the returned URL is stored on a new
book, post or tip. Admin only.
"""

from pathlib import PurePath
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from minbar.models.user import Principal
from minbar.services.media_uploader import MediaUploader
from .auth_deps import get_minbar, require_any_admin
from .content_routes import ok


router = APIRouter(tags=["uploads"])

CHUNK_SIZE = 1024 * 1024


async def read_upload(file: UploadFile, media: MediaUploader) -> bytes:
    """Read the upload, stopping as soon as it passes the byte ceiling"""
    limit = media.settings.max_upload_bytes
    chunks = []
    size = 0
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > limit:
            media.check_size(size)
        chunks.append(chunk)
    media.check_size(size)
    return b"".join(chunks)


def _default_title(filename: Optional[str]) -> str:
    return PurePath(filename or "").stem


@router.post("/uploadBook")
async def upload_book(
    request: Request,
    file: UploadFile = File(...),
    title: str = Form(""),
    principal: Principal = Depends(require_any_admin),
):
    minbar = get_minbar(request)
    data = await read_upload(file, minbar.media)
    url = await run_in_threadpool(minbar.media.upload, data, file.filename, "auto")
    title = title.strip() or _default_title(file.filename)
    book = await run_in_threadpool(minbar.books.create, title=title, url=url)
    return ok(book.to_public(), "Book uploaded successfully")


@router.post("/uploadVideo")
async def upload_video(
    request: Request,
    file: UploadFile = File(...),
    title: str = Form(""),
    description: Optional[str] = Form(None),
    principal: Principal = Depends(require_any_admin),
):
    minbar = get_minbar(request)
    data = await read_upload(file, minbar.media)
    url = await run_in_threadpool(minbar.media.upload, data, file.filename, "video")
    post = await run_in_threadpool(
        minbar.posts.create,
        title=title.strip() or _default_title(file.filename),
        description=description,
        video_url=url,
    )
    return ok(post.to_public(), "Video uploaded successfully")


@router.post("/uploadTip")
async def upload_tip(
    request: Request,
    file: UploadFile = File(...),
    text: str = Form(""),
    principal: Principal = Depends(require_any_admin),
):
    minbar = get_minbar(request)
    data = await read_upload(file, minbar.media)
    url = await run_in_threadpool(minbar.media.upload, data, file.filename, None)
    tip = await run_in_threadpool(minbar.tips.create, text=text, image_url=url)
    return ok(tip.to_public(), "Tip uploaded successfully")
