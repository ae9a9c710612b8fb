"""Regional load distribution (retropié / mediopié / antepié) from a luminosity raster."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .config import DEFAULT_CONFIG, AnalysisConfig
from .logger import get_logger
from .preprocess import luminosity_plane

logger = get_logger(__name__)


@dataclass(frozen=True)
class RegionTotals:
    """Summed intensity per longitudinal band."""

    rearfoot_sum: float
    midfoot_sum: float
    forefoot_sum: float

    @property
    def total_load(self) -> float:
        return self.rearfoot_sum + self.midfoot_sum + self.forefoot_sum


@dataclass(frozen=True)
class PressureDistribution:
    """Percentages of load per band plus the midfoot contact signal."""

    antepie: float
    mediopie: float
    retropie: float
    indice_arco: float
    total_load: float
    midfoot_pressure_ratio: float
    insufficient_contact: bool = False


def band_masks(height: int, config: AnalysisConfig = DEFAULT_CONFIG) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Boolean row masks (rearfoot, midfoot, forefoot) for an image of ``height`` rows.

    Row 0 is the heel end: rearfoot = [0, 0.35h), midfoot = [0.35h, 0.65h),
    forefoot = [0.65h, h).
    """
    rows = np.arange(height, dtype=np.float64)
    rear = rows < height * config.rearfoot_end
    fore = rows >= height * config.forefoot_start
    mid = ~rear & ~fore
    return rear, mid, fore


def region_totals(luminosity: np.ndarray, config: AnalysisConfig = DEFAULT_CONFIG) -> RegionTotals:
    """Accumulate luma above the noise threshold into the three bands."""
    plane = luminosity_plane(luminosity).astype(np.int64)
    pressure = np.where(plane > config.noise_threshold, plane, 0)
    row_sums = pressure.sum(axis=1)
    rear, mid, fore = band_masks(plane.shape[0], config)
    return RegionTotals(
        rearfoot_sum=float(row_sums[rear].sum()),
        midfoot_sum=float(row_sums[mid].sum()),
        forefoot_sum=float(row_sums[fore].sum()),
    )


def midfoot_contact_ratio(luminosity: np.ndarray, config: AnalysisConfig = DEFAULT_CONFIG) -> float:
    """Average midfoot contact width divided by image width.

    For each midfoot row, the width is rightmost minus leftmost contact column;
    rows where that span is not positive are ignored. Returns 0 when no
    midfoot row qualifies.
    """
    plane = luminosity_plane(luminosity)
    height, width = plane.shape
    if width == 0:
        return 0.0
    _, mid, _ = band_masks(height, config)
    contact = plane[mid] > config.noise_threshold
    if contact.size == 0:
        return 0.0

    has_contact = contact.any(axis=1)
    left = np.argmax(contact, axis=1)
    right = width - 1 - np.argmax(contact[:, ::-1], axis=1)
    spans = np.where(has_contact, right - left, 0)
    valid = spans > 0
    if not np.any(valid):
        return 0.0
    avg_width = float(spans[valid].mean())
    return avg_width / float(width)


def fallback_distribution(config: AnalysisConfig = DEFAULT_CONFIG) -> PressureDistribution:
    """Fixed neutral record used when the selection shows no contact."""
    return PressureDistribution(
        antepie=config.fallback_antepie,
        mediopie=config.fallback_mediopie,
        retropie=config.fallback_retropie,
        indice_arco=config.fallback_indice_arco,
        total_load=config.fallback_total_load,
        midfoot_pressure_ratio=config.fallback_midfoot_ratio,
        insufficient_contact=True,
    )


def analyze_pressure(luminosity: np.ndarray, config: AnalysisConfig = DEFAULT_CONFIG) -> PressureDistribution:
    """Compute load percentages per band and the arch index."""
    totals = region_totals(luminosity, config)
    total = totals.total_load
    if total <= 0:
        logger.warning("Ningún píxel supera el umbral de ruido (%d); se usa registro neutro.", config.noise_threshold)
        return fallback_distribution(config)

    ratio = midfoot_contact_ratio(luminosity, config)
    indice_arco = float(np.clip(1.0 - ratio, config.arch_index_min, config.arch_index_max))
    distribution = PressureDistribution(
        antepie=totals.forefoot_sum / total * 100.0,
        mediopie=totals.midfoot_sum / total * 100.0,
        retropie=totals.rearfoot_sum / total * 100.0,
        indice_arco=indice_arco,
        total_load=total,
        midfoot_pressure_ratio=ratio,
    )
    logger.debug(
        "Distribución: antepié %.1f%% | mediopié %.1f%% | retropié %.1f%% | ratio mediopié %.3f",
        distribution.antepie,
        distribution.mediopie,
        distribution.retropie,
        ratio,
    )
    return distribution
