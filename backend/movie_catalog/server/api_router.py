from __future__ import annotations

from fastapi import APIRouter

import movie_catalog.server.api.rest.v1.catalog as catalog_v1

# Canonical API router aggregator (v1 only).
api_router = APIRouter()
api_router.include_router(catalog_v1.router)

__all__ = ["api_router"]
