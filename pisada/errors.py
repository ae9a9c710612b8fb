"""Exceptions raised by the analysis core."""

from __future__ import annotations


class PisadaError(Exception):
    """Base class for every error raised by pisada."""


class ImageDecodeError(PisadaError, ValueError):
    """Encoded payload could not be decoded into a pixel grid."""


class BufferAllocationError(PisadaError, ValueError):
    """Requested crop/raster dimensions are non-positive or too large."""


class SelectionTooSmallError(PisadaError, ValueError):
    """Selection rectangle is below the minimum usable display size."""


class ConfigError(PisadaError, ValueError):
    """Invalid configuration profile."""
