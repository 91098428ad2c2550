"""Content data models: books, tips and video posts"""

import time
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Current time as integer milliseconds since the epoch"""
    return int(time.time() * 1000)


class ContentRecord(BaseModel):
    """
    Common shape of every stored content item.

    Records are persisted and served with camelCase keys (createdAt,
    imageUrl, ...). Unknown keys from older files are carried through.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str
    created_at: int = 0
    updated_at: Optional[int] = None

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Book(ContentRecord):
    """A downloadable book: title and link"""

    title: str
    url: str


class Tip(ContentRecord):
    """Short advice text, optionally illustrated"""

    text: str = ""
    image_url: Optional[str] = None


class Post(ContentRecord):
    """Video announcement"""

    title: str
    description: Optional[str] = None
    video_url: Optional[str] = None
