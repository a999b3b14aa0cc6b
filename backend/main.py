"""
CSV Insights - Main Application

FastAPI server for dataset reports and chart data.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from api.routes import charts, reports, upload
from api.schemas.responses import ERROR_RESPONSES
from core.logging_config import get_logger


logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()

    # Startup
    os.makedirs(settings.upload_dir, exist_ok=True)
    logger.info(f"{settings.app_name} v{settings.app_version} starting...")
    logger.info(f"Upload directory: {settings.upload_dir}")

    yield

    # Shutdown
    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Field type inference, data quality reports, insights and chart recommendations for CSV/JSON datasets",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(upload.router, prefix="/api/v1", tags=["Upload"], responses=ERROR_RESPONSES)
    app.include_router(reports.router, prefix="/api/v1", tags=["Reports"], responses=ERROR_RESPONSES)
    app.include_router(charts.router, prefix="/api/v1", tags=["Charts"], responses=ERROR_RESPONSES)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
