"""Process-wide holder for the loaded water grid layers."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

import requests

from sea_router.core.config import GridConfig, resolve_source
from sea_router.core.grid import GridCell
from sea_router.core.memmaps import load_mask
from sea_router.data.codec import decode_global, decode_regional
from sea_router.data.water_grid import GridLoadError, WaterGrid

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[bytes]]


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _read_source(source: str, timeout_s: float) -> bytes:
    if _is_url(source):
        try:
            response = requests.get(source, timeout=timeout_s)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise GridLoadError(f"could not fetch {source}: {exc}") from exc
        return response.content
    try:
        return Path(source).read_bytes()
    except OSError as exc:
        raise GridLoadError(f"could not read {source}: {exc}") from exc


def _retrieve_exception(task: asyncio.Future) -> None:
    # mark the failure as seen even when every waiter was cancelled
    if not task.cancelled():
        task.exception()


class WaterGridStore:
    """Loads the global and regional layers once and answers lookups.

    ``load()`` is single-flight: concurrent callers await the same task and
    only one fetch happens. After a failure the task is dropped so the next
    call retries. Layers are read-only once loaded.
    """

    def __init__(
        self,
        global_source: Optional[str] = None,
        regional_source: Optional[str] = None,
        fetch: Optional[Fetcher] = None,
        request_timeout_s: float = 30.0,
    ):
        self.global_source = global_source
        self.regional_source = regional_source
        self.request_timeout_s = request_timeout_s
        self._fetch = fetch
        self._global: Optional[WaterGrid] = None
        self._regions: Tuple[WaterGrid, ...] = ()
        self._load_task: Optional[asyncio.Future] = None

    @classmethod
    def from_config(cls, config: GridConfig, fetch: Optional[Fetcher] = None) -> "WaterGridStore":
        regional = resolve_source(config.regional_source) if config.regional_source else None
        return cls(
            global_source=resolve_source(config.global_source),
            regional_source=regional,
            fetch=fetch,
            request_timeout_s=config.request_timeout_s,
        )

    @classmethod
    def from_grids(cls, global_grid: WaterGrid, regions: Sequence[WaterGrid] = ()) -> "WaterGridStore":
        """Build an already-loaded store around in-memory layers."""
        store = cls()
        store._global = global_grid
        store._regions = tuple(regions)
        return store

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @property
    def loaded(self) -> bool:
        return self._global is not None

    @property
    def global_grid(self) -> Optional[WaterGrid]:
        return self._global

    @property
    def regions(self) -> Tuple[WaterGrid, ...]:
        return self._regions

    async def load(self) -> None:
        if self._global is not None:
            return
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load())
            self._load_task.add_done_callback(_retrieve_exception)
        # shield: one cancelled waiter must not cancel the shared load
        await asyncio.shield(self._load_task)

    async def _load(self) -> None:
        try:
            global_grid, regions = await self._load_layers()
        except BaseException:
            self._load_task = None
            raise
        self._global = global_grid
        self._regions = tuple(regions)
        spec = global_grid.spec
        logger.info(
            "[WaterGridStore] Global grid: %dx%d @ %s deg",
            spec.cols, spec.rows, spec.resolution,
        )
        if self._regions:
            logger.info(
                "[WaterGridStore] Regional grids: %s @ %s deg",
                ", ".join(r.name for r in self._regions),
                self._regions[0].resolution,
            )

    async def _load_layers(self) -> Tuple[WaterGrid, List[WaterGrid]]:
        if not self.global_source:
            raise GridLoadError("no global water grid source configured")

        sources = [self.global_source]
        if self.regional_source:
            sources.append(self.regional_source)
        layers = await asyncio.gather(*(self._load_source(s) for s in sources))

        global_layers = layers[0]
        if len(global_layers) != 1:
            raise GridLoadError(f"{self.global_source} is not a single global grid")
        regions = layers[1] if len(layers) > 1 else []
        return global_layers[0], regions

    async def _load_source(self, source: str) -> List[WaterGrid]:
        if source.endswith(".npy") and self._fetch is None:
            return [await asyncio.to_thread(load_mask, source)]
        data = await self._read(source)
        if data[:1] == b"{":
            return await asyncio.to_thread(decode_regional, data)
        return [await asyncio.to_thread(decode_global, data)]

    async def _read(self, source: str) -> bytes:
        if self._fetch is not None:
            try:
                return await self._fetch(source)
            except GridLoadError:
                raise
            except Exception as exc:
                raise GridLoadError(f"could not fetch {source}: {exc}") from exc
        return await asyncio.to_thread(_read_source, source, self.request_timeout_s)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def region_for(self, lat: float, lng: float) -> Optional[WaterGrid]:
        for region in self._regions:
            if region.spec.contains(lat, lng):
                return region
        return None

    def layer_for(self, lat: float, lng: float) -> Optional[WaterGrid]:
        """Best layer covering a point: a regional grid if one projects it, else global."""
        region = self.region_for(lat, lng)
        if region is not None and region.project(lat, lng) is not None:
            return region
        return self._global

    def layer_for_pair(self, a: Tuple[float, float], b: Tuple[float, float]) -> Optional[WaterGrid]:
        """Regional layer when both points sit in the same region, else global."""
        region_a = self.region_for(*a)
        region_b = self.region_for(*b)
        if (
            region_a is not None
            and region_a is region_b
            and region_a.project(*a) is not None
            and region_a.project(*b) is not None
        ):
            return region_a
        return self._global

    def is_water(self, lat: float, lng: float) -> bool:
        layer = self.layer_for(lat, lng)
        if layer is None:
            return False
        return layer.is_water(lat, lng)

    def project(self, lat: float, lng: float, layer: Optional[WaterGrid] = None) -> Optional[GridCell]:
        layer = layer or self.layer_for(lat, lng)
        if layer is None:
            return None
        return layer.project(lat, lng)

    def unproject(self, cell: Tuple[int, int], layer: Optional[WaterGrid] = None) -> Tuple[float, float]:
        layer = layer or self._global
        if layer is None:
            raise GridLoadError("water grid is not loaded")
        return layer.unproject(cell)
