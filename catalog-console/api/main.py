"""
Catalog Console API.

Serves the admin screens for sell-date buckets, exposure order editing and
bulk sell-date changes. Run with any ASGI server, e.g.

    uvicorn api.main:app --reload
"""

import os
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.routers import catalog, sell_dates
from domain.time import BUSINESS_TZ, civil_date

API_PREFIX = "/api/v1"


def _allowed_origins() -> list[str]:
    """Comma-separated CATALOG_CORS_ORIGINS; every origin when unset."""

    raw = os.getenv("CATALOG_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


def create_app() -> FastAPI:
    app = FastAPI(
        title="Catalog Console API",
        description="Sell-date buckets, storefront exposure order and bulk sell-date changes",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(catalog.router, prefix=API_PREFIX, tags=["Catalog Order"])
    app.include_router(sell_dates.router, prefix=API_PREFIX, tags=["Sell Dates"])

    @app.get("/health", tags=["Health"])
    def health_check():
        """
        Health check endpoint.

        Also reports the business day that bucket classification uses right now.
        """
        return {
            "status": "healthy",
            "version": __version__,
            "business_date": civil_date(datetime.now(timezone.utc)).isoformat(),
            "business_timezone": BUSINESS_TZ.tzname(None),
        }

    @app.get("/", tags=["Root"])
    def root():
        return {
            "message": "Catalog Console API",
            "version": __version__,
            "buckets": f"{API_PREFIX}/catalog/buckets",
            "docs": "/docs",
        }

    return app


app = create_app()
