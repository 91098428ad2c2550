"""YouTube RSS pass-through"""

from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from .auth_deps import get_minbar


router = APIRouter(tags=["feed"])


@router.get("/youtube-feed")
async def youtube_feed(request: Request, channel_id: Optional[str] = Query(None, alias="channelId")):
    """Return the channel's RSS document verbatim"""
    feed = get_minbar(request).feed
    document = await run_in_threadpool(feed.fetch, channel_id)
    return Response(content=document.content, media_type=document.content_type)
