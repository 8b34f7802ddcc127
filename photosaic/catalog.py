"""Sub-image catalog: tiles normalised to cell size with colour statistics."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace

import numpy as np
from PIL import Image

from photosaic.color_utils import luminance_array
from photosaic.errors import NoSubImages
from photosaic.grid import GridGeometry
from photosaic.image_io import ChannelStats, ImageSource, channel_stats, fit_to_cell, load_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """One candidate tile.

    Attributes:
        image: RGBA tile sized exactly to one grid cell.
        stats: Channel statistics of *image*.
        index: Position of the tile in the caller's input sequence.
    """

    image: Image.Image
    stats: ChannelStats
    index: int

    @property
    def luminance(self) -> float:
        return self.stats.mean.luminance

    def clone(self) -> CatalogEntry:
        """Copy with an independent pixel buffer."""
        return replace(self, image=self.image.copy())


class Catalog(Sequence):
    """Immutable ordered collection of :class:`CatalogEntry`."""

    def __init__(self, entries: Sequence[CatalogEntry], sorted_by_luminance: bool = False) -> None:
        if not entries:
            msg = "At least one sub-image is required"
            raise NoSubImages(msg)
        self._entries = tuple(entries)
        self.sorted_by_luminance = sorted_by_luminance
        self.luminances = luminance_array(
            [[e.stats.mean.r, e.stats.mean.g, e.stats.mean.b] for e in self._entries]
        )
        self.luminances.setflags(write=False)

    def __getitem__(self, i):
        return self._entries[i]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def sorted(self) -> Catalog:
        """Catalog ordered by ascending luminance; ties keep input order."""
        order = np.argsort(self.luminances, kind="stable")
        return Catalog([self._entries[i] for i in order], sorted_by_luminance=True)


def make_entry(img: Image.Image, index: int, cell_size: tuple[int, int]) -> CatalogEntry:
    """Fit a decoded image to *cell_size* and record its statistics."""
    tile = fit_to_cell(img, cell_size)
    return CatalogEntry(image=tile, stats=channel_stats(tile), index=index)


def _load_entry(source: ImageSource, index: int, cell_size: tuple[int, int]) -> CatalogEntry:
    return make_entry(load_image(source), index, cell_size)


async def build_catalog(
    sources: Sequence[ImageSource],
    geometry: GridGeometry,
    sort_by_luminance: bool = False,
) -> Catalog:
    """Load, normalise and measure every sub-image concurrently.

    Args:
        sources:           Sub-images in caller order.
        geometry:          Grid whose cell size the tiles are fitted to.
        sort_by_luminance: Return the catalog ordered for the closest-colour
                           strategy.

    Raises:
        NoSubImages: *sources* is empty.
    """
    if not sources:
        msg = "At least one sub-image is required"
        raise NoSubImages(msg)

    t0 = time.perf_counter()
    entries = await asyncio.gather(*(
        asyncio.to_thread(_load_entry, src, i, geometry.cell_size)
        for i, src in enumerate(sources)
    ))
    catalog = Catalog(entries)
    if sort_by_luminance:
        catalog = catalog.sorted()
    logger.info(
        "Catalog ready: %d tiles at %dx%d  (%.2f s)",
        len(catalog), geometry.cell_width, geometry.cell_height,
        time.perf_counter() - t0,
    )
    return catalog
