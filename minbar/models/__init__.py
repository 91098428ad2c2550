"""Data models for content, users and site flags"""

from .content import Book, Tip, Post, ContentRecord, now_ms
from .user import User, Session, Principal, ROLE_SUPERADMIN, ROLE_ADMIN
from .site_flag import SiteFlag

__all__ = [
    "Book",
    "Tip",
    "Post",
    "ContentRecord",
    "now_ms",
    "User",
    "Session",
    "Principal",
    "ROLE_SUPERADMIN",
    "ROLE_ADMIN",
    "SiteFlag",
]
