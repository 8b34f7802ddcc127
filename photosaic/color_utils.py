"""Colour values and the luma approximation used for tile matching."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# Linear luma weights for R, G, B.
LUMA_WEIGHTS = np.array([0.3, 0.59, 0.11])


def luminance(r: float, g: float, b: float) -> float:
    """Perceptual brightness approximation ``0.3R + 0.59G + 0.11B``."""
    return 0.3 * r + 0.59 * g + 0.11 * b


def luminance_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorised :func:`luminance` over an (N, 3) array of channel means."""
    return np.asarray(rgb, dtype=np.float64).reshape(-1, 3) @ LUMA_WEIGHTS


@dataclass(frozen=True)
class Color:
    """Mean channel values, each a float in [0, 255]."""

    r: float
    g: float
    b: float
    a: float = 255.0

    @property
    def luminance(self) -> float:
        return luminance(self.r, self.g, self.b)

    def to_rgba(self, alpha: float | None = None) -> tuple[int, int, int, int]:
        """Round to an 8-bit RGBA tuple, optionally replacing the alpha."""
        a = self.a if alpha is None else alpha
        return (
            _clamp(self.r),
            _clamp(self.g),
            _clamp(self.b),
            _clamp(a),
        )


def _clamp(value: float) -> int:
    return int(min(255, max(0, round(value))))
