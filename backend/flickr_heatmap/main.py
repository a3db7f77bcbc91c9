"""
Flickr Heatmap API
==================
FastAPI application entry point. Mount routers here.
"""

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flickr_heatmap.config import get_settings
from flickr_heatmap.errors import HeatmapError
from flickr_heatmap.routers import auth, photos, snapshot, user

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a consistent format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(
    title="Flickr Heatmap API",
    description="Daily photo-activity heatmaps for Flickr accounts",
    version="0.1.0",
    docs_url="/api/docs" if settings.environment != "production" else None,
    redoc_url="/api/redoc" if settings.environment != "production" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(photos.router)
app.include_router(user.router)
app.include_router(snapshot.router)


@app.exception_handler(HeatmapError)
async def heatmap_error_handler(request: Request, exc: HeatmapError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s on %s: %s", exc.kind, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content={"detail": exc.to_dict()})


@app.get("/api/v1/health")
async def health_check() -> dict:
    return {"status": "ok", "service": "flickr-heatmap-api"}
