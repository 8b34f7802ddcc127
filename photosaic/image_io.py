"""Image decoding, resizing, statistics, tinting and encoding.

Everything that touches pixels goes through this module; the rest of the
package treats Pillow images as opaque handles.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import numpy as np
from PIL import Image, ImageOps

from photosaic.color_utils import Color

# Formats Pillow cannot write with an alpha channel.
_OPAQUE_FORMATS = frozenset({"JPEG", "BMP"})
_FORMAT_ALIASES = {"JPG": "JPEG", "TIF": "TIFF"}


# -- Input variants ----------------------------------------------------

@dataclass(frozen=True)
class FileSource:
    """An image stored on the local filesystem."""

    path: Path

    def read_bytes(self) -> bytes:
        return Path(self.path).read_bytes()


@dataclass(frozen=True)
class BytesSource:
    """An image already held in memory as encoded bytes."""

    data: bytes

    def read_bytes(self) -> bytes:
        return bytes(self.data)


@dataclass(frozen=True)
class StreamSource:
    """A readable binary stream; consumed once, on first read."""

    stream: BinaryIO

    def read_bytes(self) -> bytes:
        return self.stream.read()


ImageSource = FileSource | BytesSource | StreamSource


# -- Decode / encode ---------------------------------------------------

def decode(data: bytes) -> Image.Image:
    """Decode encoded bytes into a fully loaded Pillow image."""
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def load_image(source: ImageSource) -> Image.Image:
    """Materialise *source* to bytes, decode it and fix its orientation."""
    return normalize_orientation(decode(source.read_bytes()))


def metadata(img: Image.Image) -> dict[str, int]:
    """Pixel dimensions of a decoded image."""
    return {"width": img.width, "height": img.height}


def encode(img: Image.Image, fmt: str = "png") -> bytes:
    """Encode *img* to bytes in raster format *fmt* (e.g. ``"png"``)."""
    pil_format = fmt.upper()
    pil_format = _FORMAT_ALIASES.get(pil_format, pil_format)
    if pil_format in _OPAQUE_FORMATS and img.mode != "RGB":
        img = img.convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format=pil_format)
    return buf.getvalue()


# -- Geometry ----------------------------------------------------------

def normalize_orientation(img: Image.Image) -> Image.Image:
    """Apply the EXIF orientation tag, if any, and return an RGBA image."""
    img = ImageOps.exif_transpose(img)
    return img.convert("RGBA")


def resize(img: Image.Image, width: int, height: int | None = None) -> Image.Image:
    """Resize to *width*; the height follows the aspect ratio unless given."""
    if height is None:
        height = max(1, round(img.height * width / img.width))
    if img.size == (width, height):
        return img.copy()
    return img.resize((width, height), Image.LANCZOS)


def fit_to_cell(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Scale and centre-crop *img* so that it covers exactly *size*."""
    return ImageOps.fit(img.convert("RGBA"), size, Image.LANCZOS)


def extract_region(img: Image.Image, box: tuple[int, int, int, int]) -> Image.Image:
    """Copy the ``(left, top, right, bottom)`` rectangle out of *img*."""
    return img.crop(box)


# -- Statistics --------------------------------------------------------

@dataclass(frozen=True)
class ChannelStats:
    """Per-channel statistics of an RGBA image."""

    mean: Color
    stddev: tuple[float, float, float, float]
    entropy: float | None = None


def _channel_moments(img: Image.Image) -> tuple[np.ndarray, np.ndarray]:
    arr = np.asarray(img.convert("RGBA"), dtype=np.float64).reshape(-1, 4)
    return arr.mean(axis=0), arr.std(axis=0)


def channel_mean(img: Image.Image) -> Color:
    """Mean R, G, B and A of *img*."""
    mean, _ = _channel_moments(img)
    return Color(*(float(v) for v in mean))


def channel_stats(img: Image.Image, with_entropy: bool = True) -> ChannelStats:
    """Means and standard deviations per channel, plus optional entropy."""
    mean, std = _channel_moments(img)
    return ChannelStats(
        mean=Color(*(float(v) for v in mean)),
        stddev=tuple(float(v) for v in std),
        entropy=float(img.entropy()) if with_entropy else None,
    )


# -- Compositing -------------------------------------------------------

def tint(img: Image.Image, color: Color, intensity: float) -> Image.Image:
    """Lay a solid *color* rectangle with alpha *intensity* over *img*."""
    base = img.convert("RGBA")
    overlay = Image.new("RGBA", base.size, color.to_rgba(alpha=intensity * 255))
    return Image.alpha_composite(base, overlay)


def overlay_composite(
    canvas: Image.Image,
    layers: list[tuple[Image.Image, int, int]],
) -> Image.Image:
    """Alpha-composite ``(image, left, top)`` layers onto *canvas* in order.

    The canvas is modified in place and returned.
    """
    for layer, left, top in layers:
        canvas.alpha_composite(layer.convert("RGBA"), dest=(left, top))
    return canvas
