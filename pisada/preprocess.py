"""Preprocessing: luminosity (BT.601) conversion of the cropped footprint."""

from __future__ import annotations

import numpy as np

from .errors import BufferAllocationError

# ITU-R BT.601 luma weights for R, G, B.
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def to_luminosity(image_rgb: np.ndarray) -> np.ndarray:
    """Convert an RGB(A) crop to a luminosity raster.

    Light areas map to high values, read downstream as high pressure. The
    result keeps three identical channels so it can be displayed as-is.
    With an alpha channel the colour is premultiplied first, so fully
    transparent pixels read as black (no contact).
    """
    if image_rgb.ndim != 3 or image_rgb.shape[2] < 3:
        raise ValueError(f"Se esperaba imagen RGB/RGBA, recibida forma {image_rgb.shape}")
    if image_rgb.shape[0] == 0 or image_rgb.shape[1] == 0:
        raise BufferAllocationError("No se puede convertir una imagen vacía.")

    rgb = image_rgb[:, :, :3].astype(np.float64)
    if image_rgb.shape[2] == 4:
        rgb *= image_rgb[:, :, 3:4].astype(np.float64) / 255.0
    luma = rgb @ LUMA_WEIGHTS
    luma_u8 = np.clip(np.rint(luma), 0, 255).astype(np.uint8)
    return np.repeat(luma_u8[:, :, None], 3, axis=2)


def luminosity_plane(raster: np.ndarray) -> np.ndarray:
    """Return the single logical channel of a luminosity raster as 2-D uint8."""
    if raster.ndim == 2:
        return raster
    return raster[:, :, 0]
