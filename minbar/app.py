"""Application container: wires settings, storage and services together"""

from typing import Optional

from .auth.authenticators import Authenticator, create_authenticator
from .auth.service import AuthService
from .auth.sessions import SessionStore
from .auth.shared_secret import SharedSecretStore
from .services.content_service import BookService, PostService, TipService
from .services.maintenance import MaintenanceService
from .services.media_uploader import MediaUploader
from .services.user_store import UserStore
from .services.youtube_feed import YouTubeFeedClient
from .storage import Repository, create_repository
from .utils.config import Settings, get_settings
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


class MinbarApp:
    """Holds one instance of every service for the lifetime of the process"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.repository: Optional[Repository] = None
        self.books: Optional[BookService] = None
        self.tips: Optional[TipService] = None
        self.posts: Optional[PostService] = None
        self.users: Optional[UserStore] = None
        self.sessions: Optional[SessionStore] = None
        self.authenticator: Optional[Authenticator] = None
        self.auth: Optional[AuthService] = None
        self.maintenance: Optional[MaintenanceService] = None
        self.media: Optional[MediaUploader] = None
        self.feed: Optional[YouTubeFeedClient] = None

    def initialize(self) -> "MinbarApp":
        """Initialize the application"""
        log = self.settings.logging
        setup_logger(
            log_level=log.level,
            log_format=log.format,
            file_path=log.file_path,
            max_bytes=log.max_bytes,
            backup_count=log.backup_count,
        )

        self.repository = create_repository(self.settings.storage)

        self.books = BookService(self.repository)
        self.tips = TipService(self.repository)
        self.posts = PostService(self.repository)

        auth_settings = self.settings.auth
        self.users = UserStore(self.repository, auth_settings)
        self.sessions = SessionStore(self.repository)
        secret = SharedSecretStore(self.repository, auth_settings)
        self.authenticator = create_authenticator(auth_settings, self.users, self.sessions, secret)
        self.auth = AuthService(self.authenticator, self.users, self.sessions)

        self.maintenance = MaintenanceService(self.repository)
        self.media = MediaUploader(self.settings.media)
        self.feed = YouTubeFeedClient(self.settings.feed)

        self.users.migrate_legacy_records()
        self.users.ensure_default_superadmin()

        logger.info(
            "Configuration loaded",
            app_name=self.settings.app.name,
            version=self.settings.app.version,
            environment=self.settings.app.environment,
            storage=self.settings.storage.backend,
            auth_strategy=self.authenticator.name,
            media_configured=self.media.is_configured(),
        )
        return self

    def shutdown(self) -> None:
        if self.repository is not None:
            self.repository.close()
        logger.info("Minbar application stopped")
