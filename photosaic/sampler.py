"""Per-cell average colours of the source, measured on a down-sized proxy."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from PIL import Image

from photosaic.color_utils import Color
from photosaic.grid import GridGeometry, scaled_height
from photosaic.image_io import channel_mean, extract_region, resize

logger = logging.getLogger(__name__)

# Reference width of the sampling proxy, independent of the output width.
SAMPLE_WIDTH = 400


def make_proxy(source: Image.Image, grid_num: int, sample_width: int = SAMPLE_WIDTH) -> Image.Image:
    """Resize *source* to the sampling width, at least one pixel per cell."""
    width = max(sample_width, grid_num)
    height = max(scaled_height(source.width, source.height, width), grid_num)
    return resize(source, width, height)


def proxy_geometry(proxy: Image.Image, grid_num: int) -> GridGeometry:
    """Cells of the proxy; the right and bottom remainders are ignored."""
    return GridGeometry(
        grid_num=grid_num,
        cell_width=proxy.width // grid_num,
        cell_height=proxy.height // grid_num,
    )


async def sample_grid(
    source: Image.Image,
    geometry: GridGeometry,
    sample_width: int = SAMPLE_WIDTH,
    on_cell: Callable[[], None] | None = None,
) -> list[list[Color]]:
    """Average colour of every grid cell, indexed ``colors[row][col]``.

    Cells of a row are measured concurrently; *on_cell* is called once per
    measured cell.
    """
    t0 = time.perf_counter()
    g = geometry.grid_num
    proxy = await asyncio.to_thread(make_proxy, source, g, sample_width)
    cells = proxy_geometry(proxy, g)

    async def _sample(row: int, col: int) -> Color:
        region = extract_region(proxy, cells.cell_box(row, col))
        color = await asyncio.to_thread(channel_mean, region)
        if on_cell is not None:
            on_cell()
        return color

    colors: list[list[Color]] = []
    for row in range(g):
        colors.append(list(await asyncio.gather(*(_sample(row, col) for col in range(g)))))

    logger.info(
        "Sampled %dx%d grid on %dx%d proxy  (%.2f s)",
        g, g, proxy.width, proxy.height, time.perf_counter() - t0,
    )
    return colors
