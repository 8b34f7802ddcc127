"""Grid geometry: cell and canvas dimensions for a mosaic."""

from __future__ import annotations

from dataclasses import dataclass

from photosaic.errors import InvalidGrid


@dataclass(frozen=True)
class GridGeometry:
    """Cell size and the exactly-tiled canvas built from it.

    The canvas is always ``grid_num`` whole cells per side; any remainder
    of the resized source that does not fill a whole cell is dropped.
    """

    grid_num: int
    cell_width: int
    cell_height: int

    @property
    def canvas_width(self) -> int:
        return self.cell_width * self.grid_num

    @property
    def canvas_height(self) -> int:
        return self.cell_height * self.grid_num

    @property
    def cell_size(self) -> tuple[int, int]:
        return self.cell_width, self.cell_height

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self.canvas_width, self.canvas_height

    def cell_box(self, row: int, col: int) -> tuple[int, int, int, int]:
        """Pillow-style ``(left, top, right, bottom)`` box of a cell."""
        left = col * self.cell_width
        top = row * self.cell_height
        return left, top, left + self.cell_width, top + self.cell_height


def scaled_height(width: int, height: int, new_width: int) -> int:
    """Height after resizing ``width x height`` to *new_width*, aspect preserved."""
    return max(1, round(height * new_width / width))


def compute_geometry(
    source_width: int | None,
    source_height: int | None,
    grid_num: int,
    output_width: int | None = None,
) -> GridGeometry:
    """Derive cell and canvas dimensions.

    ``cell_width = floor(output_width / grid_num)`` and the cell height keeps
    the source aspect ratio: ``floor(cell_width * source_height / output_width)``.
    Integer arithmetic avoids float rounding at exact multiples.

    Args:
        source_width:  Width of the (resized) source image.
        source_height: Height of the (resized) source image.
        grid_num:      Tiles per side.
        output_width:  Requested canvas width; defaults to *source_width*.

    Raises:
        InvalidGrid: non-positive *grid_num*, missing source dimensions, or a
            grid too fine to give every cell at least one pixel.
    """
    if grid_num <= 0:
        msg = f"grid_num must be positive, got {grid_num}"
        raise InvalidGrid(msg)
    if not source_width or not source_height or source_width < 0 or source_height < 0:
        msg = f"Source dimensions unavailable ({source_width}x{source_height})"
        raise InvalidGrid(msg)

    basis = output_width or source_width
    cell_width = basis // grid_num
    cell_height = cell_width * source_height // basis
    if cell_width == 0 or cell_height == 0:
        msg = (
            f"Grid of {grid_num} cells per side is too fine for a "
            f"{basis}x{source_height} canvas"
        )
        raise InvalidGrid(msg)
    return GridGeometry(grid_num=grid_num, cell_width=cell_width, cell_height=cell_height)
