"""Dependency wiring for API service."""
from __future__ import annotations

from functools import lru_cache

from sea_router.core.config import get_config
from sea_router.data.store import WaterGridStore
from sea_router.routing.router import SeaRouter


@lru_cache(maxsize=1)
def get_store() -> WaterGridStore:
    return WaterGridStore.from_config(get_config().grid)


@lru_cache(maxsize=1)
def get_router() -> SeaRouter:
    return SeaRouter(get_store(), get_config())
