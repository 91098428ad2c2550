"""YouTube channel RSS proxy"""

from dataclasses import dataclass
from typing import Optional

import requests

from ..utils.config import FeedSettings
from ..utils.exceptions import UpstreamError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class FeedDocument:
    content: bytes
    content_type: str = "application/xml"


class YouTubeFeedClient:
    def __init__(self, settings: FeedSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def fetch(self, channel_id: Optional[str]) -> FeedDocument:
        """Fetch a channel's videos feed; the body is returned untouched"""
        channel_id = (channel_id or "").strip()
        if not channel_id:
            raise ValidationError("channelId is required")

        try:
            response = self.session.get(
                self.settings.base_url,
                params={"channel_id": channel_id},
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error("Feed request failed", channel_id=channel_id, error=str(e))
            raise UpstreamError(f"Failed to fetch feed: {e}")

        if not response.ok:
            logger.warning("Feed source returned an error", channel_id=channel_id, status=response.status_code)
            raise UpstreamError(f"Feed source returned HTTP {response.status_code}")

        return FeedDocument(content=response.content)
