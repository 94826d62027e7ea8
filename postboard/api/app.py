"""
FastAPI application for postboard.

Thin HTTP layer: parses requests into core values, calls the services,
and maps domain errors to status codes. No business rules live here.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, Form, Query, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from postboard import __version__
from postboard.auth.dependencies import get_principal, get_services
from postboard.auth.principal import Principal
from postboard.auth.routes import accounts_router, router as auth_router
from postboard.auth.tokens import TokenError
from postboard.config import Settings, configure_logging, get_settings
from postboard.core.errors import (
    DuplicateIdentity,
    EmptyAttachment,
    Forbidden,
    IdentityNotFound,
    PostboardError,
    PostNotFound,
    StorageIO,
    Unauthenticated,
    ValidationFailed,
)
from postboard.core.models import FilePayload, Page, PageRequest, Post, PostInput, SearchKind
from postboard.integrations.sentry import init_sentry
from postboard.services.provider import ServiceProvider, create_services
from postboard.storage.base import StorageProvider

logger = logging.getLogger(__name__)


# Domain error -> HTTP status
ERROR_STATUS: dict[type[PostboardError], int] = {
    ValidationFailed: 400,
    EmptyAttachment: 400,
    Unauthenticated: 401,
    Forbidden: 403,
    IdentityNotFound: 404,
    PostNotFound: 404,
    DuplicateIdentity: 409,
    StorageIO: 500,
}


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging and error tracking."""
    settings: Settings = app.state.services.settings
    configure_logging(settings)
    if init_sentry(settings):
        logger.info("Sentry error tracking enabled")
    logger.info("Postboard API starting in %s mode", settings.environment)

    yield

    logger.info("Postboard API shutting down")


# =============================================================================
# Error Handlers
# =============================================================================


async def domain_error_handler(request: Request, exc: PostboardError) -> JSONResponse:
    status = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)),
        500,
    )
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content={"detail": str(exc)}, headers=headers)


async def token_error_handler(request: Request, exc: TokenError) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


# =============================================================================
# Helpers
# =============================================================================


def read_upload(file: UploadFile | None) -> FilePayload | None:
    """Turn an optional multipart file into a payload. No file field -> None."""
    if file is None or not file.filename:
        return None
    data = file.file.read()
    return FilePayload(
        data=data,
        original_name=file.filename,
        content_type=file.content_type or "application/octet-stream",
    )


# =============================================================================
# Posts
# =============================================================================


def register_post_routes(app: FastAPI) -> None:
    # Plain `def` handlers: file I/O runs in the threadpool, not on the event loop

    @app.get("/posts", response_model=Page[Post], tags=["posts"])
    def search_posts(
        kind: SearchKind = SearchKind.ALL,
        keyword: str | None = None,
        page: int = Query(0, ge=0),
        size: int | None = Query(None, ge=1),
        sort: str | None = None,
        principal: Principal | None = Depends(get_principal),
        services: ServiceProvider = Depends(get_services),
    ):
        """Search posts. A blank keyword lists everything."""
        settings = services.settings
        size = min(size or settings.default_page_size, settings.max_page_size)
        return services.posts.search(
            kind, keyword, PageRequest(page=page, size=size, sort=sort), principal
        )

    @app.get("/posts/{post_id}", response_model=Post, tags=["posts"])
    def get_post(
        post_id: int,
        principal: Principal | None = Depends(get_principal),
        services: ServiceProvider = Depends(get_services),
    ):
        """Get a post by ID."""
        return services.posts.get(post_id, principal)

    @app.post("/posts", response_model=Post, status_code=201, tags=["posts"])
    def create_post(
        title: str = Form(""),
        content: str = Form(""),
        file: UploadFile | None = File(None),
        principal: Principal | None = Depends(get_principal),
        services: ServiceProvider = Depends(get_services),
    ):
        """Create a post, optionally with one attached file."""
        data = PostInput.of(title, content)
        return services.posts.create(principal, data, read_upload(file))

    @app.put("/posts/{post_id}", response_model=Post, tags=["posts"])
    def update_post(
        post_id: int,
        title: str = Form(""),
        content: str = Form(""),
        file: UploadFile | None = File(None),
        principal: Principal | None = Depends(get_principal),
        services: ServiceProvider = Depends(get_services),
    ):
        """Update a post. Sending a file replaces the current attachment."""
        data = PostInput.of(title, content)
        return services.posts.update(principal, post_id, data, read_upload(file))

    @app.delete("/posts/{post_id}", status_code=204, tags=["posts"])
    def delete_post(
        post_id: int,
        principal: Principal | None = Depends(get_principal),
        services: ServiceProvider = Depends(get_services),
    ):
        """Delete a post and its attachment."""
        services.posts.delete(principal, post_id)
        return Response(status_code=204)


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    storage: StorageProvider | None = None,
) -> FastAPI:
    """Build the API with its own services."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Postboard API",
        description="Posts with attachments, accounts and role-based access",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.services = create_services(settings, storage)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PostboardError, domain_error_handler)
    app.add_exception_handler(TokenError, token_error_handler)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "postboard-api"}

    app.include_router(auth_router)
    app.include_router(accounts_router)
    register_post_routes(app)

    return app
