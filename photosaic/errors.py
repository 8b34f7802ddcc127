"""Exception hierarchy for mosaic builds."""

from __future__ import annotations


class PhotosaicError(Exception):
    """Base class for every error raised by photosaic itself."""


class InvalidSource(PhotosaicError, ValueError):
    """The source image is missing, unreadable, or cannot be decoded."""


class NoSubImages(PhotosaicError, ValueError):
    """The sub-image collection is empty."""


class InvalidGrid(PhotosaicError, ValueError):
    """Grid count is not positive or the source dimensions are unusable."""


class SessionReuseError(PhotosaicError, RuntimeError):
    """A build session was started twice or re-entered while running."""
