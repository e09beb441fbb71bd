"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sea_router.api.dependencies import get_router, get_store
from sea_router.api.endpoints import router as route_router
from sea_router.data.water_grid import GridLoadError
from sea_router.routing.router import SeaRouter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await get_store().load()
    except GridLoadError as exc:
        # routing stays available; every request falls back to a straight line
        logger.error("[api] Water grid failed to load: %s; sea routing disabled", exc)
    yield


app = FastAPI(title="Sea Router", lifespan=lifespan)

# Enable CORS for all origins (adjust in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(route_router)


@app.get("/health")
def health(sea_router: SeaRouter = Depends(get_router)) -> dict[str, str]:
    return {
        "status": "ok",
        "grid": "loaded" if sea_router.store.loaded else "unavailable",
    }
