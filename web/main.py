"""FastAPI application factory for the Minbar content backend"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from minbar.app import MinbarApp
from minbar.utils.config import Settings, get_settings
from minbar.utils.logger import get_logger
from .auth_routes import router as auth_router
from .config_routes import router as config_router
from .content_routes import books_router, posts_router, tips_router
from .errors import register_error_handlers
from .feed_routes import router as feed_router
from .upload_routes import router as upload_router

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app around an initialized MinbarApp"""
    settings = settings or get_settings()
    minbar = MinbarApp(settings).initialize()

    app = FastAPI(
        title=f"{settings.app.name} API",
        description="Books, tips and video posts for the website front-end",
        version=settings.app.version,
    )
    app.state.minbar = minbar

    # CORS middleware - configurable for production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials="*" not in settings.app.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(books_router)
    app.include_router(tips_router)
    app.include_router(posts_router)
    app.include_router(upload_router)
    app.include_router(auth_router)
    app.include_router(config_router)
    app.include_router(feed_router)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return settings.app.liveness_message

    @app.on_event("shutdown")
    async def shutdown_event():
        minbar.shutdown()

    return app
