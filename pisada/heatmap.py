"""Pressure heatmap rendering (display only, never read back for metrics)."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .config import DEFAULT_CONFIG, AnalysisConfig
from .logger import get_logger
from .preprocess import luminosity_plane

logger = get_logger(__name__)

# Blue (low) -> Cyan -> Green -> Yellow -> Red (max), RGB.
GRADIENT_STOPS = np.array(
    [
        (0, 0, 255),
        (0, 255, 255),
        (0, 255, 0),
        (255, 255, 0),
        (255, 0, 0),
    ],
    dtype=np.float64,
)


def percentile_bounds(values: np.ndarray, config: AnalysisConfig = DEFAULT_CONFIG) -> Tuple[int, int]:
    """Return (min_gray, max_gray) clipped at the configured percentiles.

    ``values`` are the qualifying luminosity values (above background); they
    are sorted and indexed at ``floor(n * p)``.
    """
    if values.size == 0:
        raise ValueError("No hay valores para calcular percentiles.")
    ordered = np.sort(values, axis=None)
    n = ordered.size
    lo_idx = min(int(np.floor(n * config.percentile_low)), n - 1)
    hi_idx = min(int(np.floor(n * config.percentile_high)), n - 1)
    return int(ordered[lo_idx]), int(ordered[hi_idx])


def gradient_color(t: np.ndarray) -> np.ndarray:
    """Map positions in [0, 1] through the five-stop gradient (float RGB)."""
    t = np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)
    segments = GRADIENT_STOPS.shape[0] - 1
    scaled = t * segments
    idx = np.minimum(np.floor(scaled).astype(np.int64), segments - 1)
    frac = (scaled - idx)[..., None]
    c1 = GRADIENT_STOPS[idx]
    c2 = GRADIENT_STOPS[idx + 1]
    return c1 + (c2 - c1) * frac


def heatmap_positions(luminosity: np.ndarray, config: AnalysisConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Gamma-corrected gradient position per pixel; NaN marks background."""
    plane = luminosity_plane(luminosity)
    contact = plane > config.background_threshold
    positions = np.full(plane.shape, np.nan, dtype=np.float64)
    if not np.any(contact):
        return positions

    min_gray, max_gray = percentile_bounds(plane[contact], config)
    values = plane[contact].astype(np.float64)
    if max_gray > min_gray:
        normalized = np.clip((values - min_gray) / float(max_gray - min_gray), 0.0, 1.0)
    else:
        normalized = np.full(values.shape, 0.5)
    positions[contact] = normalized ** config.gamma
    return positions


def render_heatmap(luminosity: np.ndarray, config: AnalysisConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Render the RGB pressure map of a luminosity raster.

    Background pixels (luma <= background threshold) are pure black. An image
    without any contact renders fully black.
    """
    positions = heatmap_positions(luminosity, config)
    heatmap = np.zeros(positions.shape + (3,), dtype=np.uint8)
    contact = ~np.isnan(positions)
    if not np.any(contact):
        logger.warning("Sin píxeles de contacto sobre el umbral de fondo; heatmap negro.")
        return heatmap

    colors = gradient_color(positions[contact])
    heatmap[contact] = np.clip(np.rint(colors), 0, 255).astype(np.uint8)
    return heatmap
