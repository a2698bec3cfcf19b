import logging

import uvicorn
from fastapi import FastAPI

from movie_catalog.config.settings import SERVER_LOG_LEVEL, UVICORN_CONFIG
from movie_catalog.server.api.rest.dependencies import shutdown_dependencies
from movie_catalog.server.api_router import api_router

logging.basicConfig(
    level=SERVER_LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Movie Catalog", description="TMDB catalog viewer with genre filters and a local watchlist")

app.include_router(api_router)


@app.on_event("shutdown")
async def shutdown_event():
    """Close the TMDB session and drop any pending debounced search."""
    await shutdown_dependencies()


if __name__ == "__main__":
    uvicorn.run("movie_catalog.server.main:app", **UVICORN_CONFIG)
