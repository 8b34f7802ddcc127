"""
Photosaic
=========

Rebuild a source image as a grid of smaller sub-images, each tinted
toward the average colour of the cell it replaces. Ships two tile
selection strategies:

- **closest_color** (nearest luminance, deterministic)
- **random** (no repeats until every tile has been used)
"""

__version__ = "1.0.0"

from photosaic.catalog import Catalog, CatalogEntry, build_catalog
from photosaic.color_utils import Color, luminance
from photosaic.compositor import Compositor, Placement
from photosaic.config import PhotosaicConfig
from photosaic.errors import (
    InvalidGrid,
    InvalidSource,
    NoSubImages,
    PhotosaicError,
    SessionReuseError,
)
from photosaic.grid import GridGeometry, compute_geometry
from photosaic.image_io import BytesSource, FileSource, StreamSource
from photosaic.progress import CallbackObserver, ProgressEmitter, ProgressObserver
from photosaic.sampler import sample_grid
from photosaic.selection import ClosestColorSelector, RandomSelector, make_selector
from photosaic.session import BuildSession, Photosaic

__all__ = [
    "BuildSession",
    "BytesSource",
    "CallbackObserver",
    "Catalog",
    "CatalogEntry",
    "ClosestColorSelector",
    "Color",
    "Compositor",
    "FileSource",
    "GridGeometry",
    "InvalidGrid",
    "InvalidSource",
    "NoSubImages",
    "Photosaic",
    "PhotosaicConfig",
    "PhotosaicError",
    "Placement",
    "ProgressEmitter",
    "ProgressObserver",
    "RandomSelector",
    "SessionReuseError",
    "StreamSource",
    "build_catalog",
    "compute_geometry",
    "luminance",
    "make_selector",
    "sample_grid",
]
