"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass

from photosaic.errors import InvalidGrid

ALGORITHMS = ("random", "closest_color")

# Cells with a mean alpha below this are left transparent.
DEFAULT_ALPHA_SKIP = 10

# Pending tiles merged into the canvas per flush.
DEFAULT_FLUSH_THRESHOLD = 100


@dataclass(frozen=True)
class PhotosaicConfig:
    """All tuneable parameters for a mosaic build.

    Attributes:
        algorithm:       Tile selection strategy - "random" or "closest_color".
        grid_num:        Tiles per side of the mosaic.
        intensity:       Alpha (0-1) of the colour tint laid over each tile.
        output_width:    Target canvas width in pixels (snapped down to a
                         multiple of ``grid_num``).
        output_format:   Raster format of the encoded result.
        alpha_skip:      Cells whose sampled alpha is below this stay empty.
        flush_threshold: Pending tiles held before merging into the canvas.
        sample_width:    Width of the down-sized proxy used for colour sampling.
        seed:            Seed for the random strategy (None = non-deterministic).
    """

    algorithm: str

    # Grid
    grid_num: int = 10
    output_width: int = 400

    # Tinting
    intensity: float = 0.5
    alpha_skip: int = DEFAULT_ALPHA_SKIP

    # Assembly
    flush_threshold: int = DEFAULT_FLUSH_THRESHOLD
    sample_width: int = 400

    # Selection
    seed: int | None = None

    # Output
    output_format: str = "png"

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif"}
    )

    def __post_init__(self) -> None:
        if self.grid_num <= 0:
            msg = f"grid_num must be positive, got {self.grid_num}"
            raise InvalidGrid(msg)
        if self.algorithm not in ALGORITHMS:
            msg = f"Unknown algorithm {self.algorithm!r}; expected one of {ALGORITHMS}"
            raise ValueError(msg)
        if not 0.0 <= self.intensity <= 1.0:
            msg = f"intensity must be within [0, 1], got {self.intensity}"
            raise ValueError(msg)
        if not 0 <= self.alpha_skip <= 255:
            msg = f"alpha_skip must be within [0, 255], got {self.alpha_skip}"
            raise ValueError(msg)
        if self.flush_threshold < 1:
            msg = f"flush_threshold must be at least 1, got {self.flush_threshold}"
            raise ValueError(msg)
        if self.output_width <= 0 or self.sample_width <= 0:
            msg = "output_width and sample_width must be positive"
            raise ValueError(msg)
