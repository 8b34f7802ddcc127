"""Tinted tile placement and batched assembly of the output canvas."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from PIL import Image

from photosaic.color_utils import Color
from photosaic.config import DEFAULT_FLUSH_THRESHOLD
from photosaic.grid import GridGeometry
from photosaic.image_io import overlay_composite, tint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """A tinted tile waiting to be merged at ``(left, top)``."""

    tile: Image.Image
    left: int
    top: int


def should_skip(color: Color, alpha_skip: int) -> bool:
    """True for cells transparent enough to be left empty."""
    return color.a < alpha_skip


def place_tile(
    tile: Image.Image,
    target: Color,
    intensity: float,
    geometry: GridGeometry,
    row: int,
    col: int,
) -> Placement:
    """Tint *tile* toward *target* and position it at cell ``(row, col)``."""
    left, top, _, _ = geometry.cell_box(row, col)
    return Placement(tile=tint(tile, target, intensity), left=left, top=top)


class Compositor:
    """Accumulates placements and merges them into a transparent canvas.

    Placements are merged in the order they were added, *flush_threshold*
    at a time. Tiles never overlap, so the threshold changes peak memory
    only, not the result.
    """

    def __init__(
        self,
        geometry: GridGeometry,
        flush_threshold: int = DEFAULT_FLUSH_THRESHOLD,
        on_flush: Callable[[], None] | None = None,
    ) -> None:
        self.geometry = geometry
        self.flush_threshold = flush_threshold
        self.on_flush = on_flush
        self.canvas = Image.new("RGBA", geometry.canvas_size, (0, 0, 0, 0))
        self.pending: list[Placement] = []
        self.placed = 0
        self.flushes = 0

    def add(self, placement: Placement) -> None:
        self.pending.append(placement)
        if len(self.pending) >= self.flush_threshold:
            self.flush()

    def flush(self) -> None:
        """Merge all pending placements into the canvas and clear the batch."""
        if not self.pending:
            return
        overlay_composite(self.canvas, [(p.tile, p.left, p.top) for p in self.pending])
        self.placed += len(self.pending)
        self.flushes += 1
        logger.debug("Flush %d: %d tiles merged (%d total)", self.flushes, len(self.pending), self.placed)
        self.pending = []
        if self.on_flush is not None:
            self.on_flush()

    def finish(self) -> Image.Image:
        """Flush the remainder and return the completed canvas."""
        self.flush()
        return self.canvas
