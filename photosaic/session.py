"""Mosaic builds: one exclusively owned session per invocation."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Sequence

from PIL import Image, UnidentifiedImageError

from photosaic.catalog import Catalog, build_catalog
from photosaic.color_utils import Color
from photosaic.compositor import Compositor, Placement, place_tile, should_skip
from photosaic.config import PhotosaicConfig
from photosaic.errors import InvalidSource, NoSubImages, SessionReuseError
from photosaic.grid import GridGeometry, compute_geometry
from photosaic.image_io import ImageSource, encode, load_image, metadata, resize
from photosaic.progress import ProgressEmitter, ProgressObserver
from photosaic.sampler import sample_grid
from photosaic.selection import TileSelector, make_selector

logger = logging.getLogger(__name__)


def _load_source(source: ImageSource, output_width: int) -> Image.Image:
    try:
        img = load_image(source)
    except (OSError, UnidentifiedImageError) as exc:
        msg = f"Cannot read source image: {exc}"
        raise InvalidSource(msg) from exc
    return resize(img, output_width)


async def _gather(*aws):
    """Like :func:`asyncio.gather`, but cancels the siblings of a failed task."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


class BuildSession:
    """State of a single mosaic build.

    A session owns its catalog, selection cache, pending batch and canvas.
    It runs :meth:`build` exactly once; a second call, including a
    concurrent one, raises :class:`SessionReuseError`.
    """

    def __init__(
        self,
        config: PhotosaicConfig,
        source: ImageSource,
        sub_images: Sequence[ImageSource],
    ) -> None:
        self.config = config
        self.source = source
        self.sub_images = list(sub_images)
        self.emitter = ProgressEmitter()
        self.geometry: GridGeometry | None = None
        self.catalog: Catalog | None = None
        self.selector: TileSelector | None = None
        self.compositor: Compositor | None = None
        self._started = False

    def subscribe(self, observer: ProgressObserver):
        return self.emitter.subscribe(observer)

    async def build(self) -> bytes:
        """Run the whole pipeline and return the encoded mosaic."""
        if self._started:
            msg = "A build session can only be built once"
            raise SessionReuseError(msg)
        self._started = True

        cfg = self.config
        if not self.sub_images:
            msg = "At least one sub-image is required"
            raise NoSubImages(msg)
        t_total = time.perf_counter()

        source = await asyncio.to_thread(_load_source, self.source, cfg.output_width)
        dims = metadata(source)
        self.geometry = compute_geometry(
            dims.get("width"), dims.get("height"), cfg.grid_num, cfg.output_width,
        )
        logger.info(
            "Grid %dx%d: cells %dx%d, canvas %dx%d",
            cfg.grid_num, cfg.grid_num,
            self.geometry.cell_width, self.geometry.cell_height,
            self.geometry.canvas_width, self.geometry.canvas_height,
        )

        # Catalog and colour samples do not depend on each other
        self.catalog, colors = await _gather(
            build_catalog(
                self.sub_images, self.geometry,
                sort_by_luminance=cfg.algorithm == "closest_color",
            ),
            sample_grid(
                source, self.geometry, cfg.sample_width,
                on_cell=self.emitter.processing,
            ),
        )

        self.selector = make_selector(cfg.algorithm, self.catalog, seed=cfg.seed)
        self.compositor = Compositor(
            self.geometry, cfg.flush_threshold, on_flush=self.emitter.processing,
        )

        t0 = time.perf_counter()
        for row in range(cfg.grid_num):
            placements = await _gather(*(
                self._process_cell(row, col, colors[row][col])
                for col in range(cfg.grid_num)
            ))
            for placement in placements:
                if placement is not None:
                    self.compositor.add(placement)
        canvas = self.compositor.finish()
        logger.info(
            "Composed %d tiles in %d flushes  (%.2f s)",
            self.compositor.placed, self.compositor.flushes, time.perf_counter() - t0,
        )

        buffer = await asyncio.to_thread(encode, canvas, cfg.output_format)
        logger.info(
            "Mosaic encoded as %s: %d bytes  (%.2f s total)",
            cfg.output_format, len(buffer), time.perf_counter() - t_total,
        )
        self.emitter.complete(buffer)
        return buffer

    async def _process_cell(self, row: int, col: int, color: Color) -> Placement | None:
        # Selection runs before the first await so cells draw in column order.
        if should_skip(color, self.config.alpha_skip):
            self.emitter.processing()
            return None
        entry = self.selector.select(color)
        placement = await asyncio.to_thread(
            place_tile, entry.image, color, self.config.intensity,
            self.geometry, row, col,
        )
        self.emitter.processing()
        return placement


class Photosaic:
    """Configured mosaic factory.

    Holds only configuration; every :meth:`build` call creates a fresh
    :class:`BuildSession`, so concurrent builds never share state.

    Example::

        mosaic = Photosaic(PhotosaicConfig(algorithm="closest_color"))
        png = mosaic.build_sync(FileSource(path), [FileSource(p) for p in tiles])
    """

    def __init__(self, config: PhotosaicConfig) -> None:
        self.config = config

    def session(
        self,
        source: ImageSource,
        sub_images: Sequence[ImageSource],
        observers: Iterable[ProgressObserver] = (),
    ) -> BuildSession:
        session = BuildSession(self.config, source, sub_images)
        for observer in observers:
            session.subscribe(observer)
        return session

    async def build(
        self,
        source: ImageSource,
        sub_images: Sequence[ImageSource],
        observers: Iterable[ProgressObserver] = (),
    ) -> bytes:
        return await self.session(source, sub_images, observers).build()

    def build_sync(
        self,
        source: ImageSource,
        sub_images: Sequence[ImageSource],
        observers: Iterable[ProgressObserver] = (),
    ) -> bytes:
        """Blocking wrapper around :meth:`build` for non-async callers."""
        return asyncio.run(self.build(source, sub_images, observers))
