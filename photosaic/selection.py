"""Tile selection strategies.

Two interchangeable selectors pick a catalog entry for a cell's target
colour:

- **random** - uniform draws without replacement from a working copy of the
  catalog, refilled once exhausted.
- **closest_color** - binary search for the nearest luminance over a
  luminance-sorted catalog.

Both return clones, so callers may modify the returned tile freely.
"""

from __future__ import annotations

import abc

import numpy as np

from photosaic.catalog import Catalog, CatalogEntry
from photosaic.color_utils import Color


class TileSelector(abc.ABC):
    """Chooses one catalog entry per target colour."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog

    def select(self, target: Color) -> CatalogEntry:
        return self.catalog[self.select_index(target)].clone()

    @abc.abstractmethod
    def select_index(self, target: Color) -> int:
        """Position in :attr:`catalog` of the entry to use for *target*."""


class RandomSelector(TileSelector):
    """Uniform random choice without repeats inside one exhaustion cycle."""

    def __init__(self, catalog: Catalog, seed: int | None = None) -> None:
        super().__init__(catalog)
        self.rng = np.random.default_rng(seed)
        self._cache: list[int] = []

    @property
    def remaining(self) -> int:
        return len(self._cache)

    def select_index(self, target: Color) -> int:
        if not self._cache:
            self._cache = list(range(len(self.catalog)))
        i = int(self.rng.integers(len(self._cache)))
        return self._cache.pop(i)


class ClosestColorSelector(TileSelector):
    """Nearest luminance by binary search; never mutates the catalog."""

    def __init__(self, catalog: Catalog) -> None:
        if not catalog.sorted_by_luminance:
            catalog = catalog.sorted()
        super().__init__(catalog)

    def select_index(self, target: Color) -> int:
        return closest_index(self.catalog.luminances, target.luminance)


def closest_index(luminances: np.ndarray, target: float) -> int:
    """Index of the value nearest *target* in ascending *luminances*.

    The window ``[lo, hi]`` always brackets *target* (or touches the end it
    lies beyond). An exact hit at the midpoint returns immediately; once the
    window is two adjacent entries the closer one wins, the lower on a tie.
    """
    lo, hi = 0, len(luminances) - 1
    while hi - lo > 1:
        mid = (lo + hi) // 2
        value = luminances[mid]
        if value == target:
            return mid
        if target < value:
            hi = mid
        else:
            lo = mid
    if abs(luminances[hi] - target) < abs(luminances[lo] - target):
        return hi
    return lo


def make_selector(algorithm: str, catalog: Catalog, seed: int | None = None) -> TileSelector:
    if algorithm == "random":
        return RandomSelector(catalog, seed=seed)
    if algorithm == "closest_color":
        return ClosestColorSelector(catalog)
    msg = f"Unknown algorithm {algorithm!r}"
    raise ValueError(msg)
