"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from imagehost.api.router import api_router
from imagehost.api.v1.health import router as health_router
from imagehost.config import Settings, get_settings
from imagehost.middleware.error_handler import setup_exception_handlers
from imagehost.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware
from imagehost.middleware.request_logger import RequestLoggerMiddleware
from imagehost.services.image import ImageProcessor, ImageService, MetadataStore
from imagehost.services.storage import create_storage

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIDLogFilter) for f in handler.filters):
            handler.addFilter(RequestIDLogFilter())


def build_image_service(settings: Settings) -> ImageService:
    """
    Wire storage, processor, and metadata store.

    Raises:
        MetadataCorruptError: If an existing metadata file cannot be parsed
    """
    storage = create_storage(settings)
    metadata = MetadataStore(settings.metadata_path)
    processor = ImageProcessor(settings.image_quality)

    return ImageService(
        storage=storage,
        processor=processor,
        metadata=metadata,
        allowed_types=settings.allowed_types_list,
        max_size=settings.image_max_size,
        public_url_prefix=settings.storage_base_url,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Storage type: {settings.storage_type}")
    logger.info(f"Storage path: {settings.storage_base_path}")
    logger.info(f"Auth enabled: {settings.auth_enabled}")

    service = build_image_service(settings)
    app.state.image_service = service

    # Serve stored files when the backend has a local root
    static_root = service.storage.base_path
    if static_root is not None:
        app.mount(
            settings.storage_mount_path,
            StaticFiles(directory=static_root),
            name="images",
        )

    yield

    # Shutdown
    logger.info("Shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory."""
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        description="Image hosting API: upload, WebP conversion, and management",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Authorization"],
        expose_headers=["Content-Length", RequestIDMiddleware.HEADER_NAME],
    )

    # Request logging runs inside the request ID middleware
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routes
    app.include_router(health_router, tags=["Health"])
    app.include_router(api_router, prefix="/api")

    return app


app = create_app()
