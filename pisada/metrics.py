"""Metric extraction for one foot side: load distribution, arch type, angles, contact area."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .config import DEFAULT_CONFIG, AnalysisConfig
from .geometry import (
    NavicularTriangle,
    PosteriorLines,
    check_side,
    navicular_angle,
    rearfoot_alignment,
    rearfoot_angle,
)
from .logger import get_logger
from .pressure import analyze_pressure
from .region import SelectionRegion

logger = get_logger(__name__)

ARCH_TYPES = ("plano", "cavo", "neutro")


@dataclass(frozen=True)
class ContactArea:
    """Real-world footprint size: length and width in cm, area in cm²."""

    length: float
    width: float
    area: float


@dataclass(frozen=True)
class FootMetrics:
    """Computed footprint metrics for one foot side."""

    foot_side: str
    antepie: float
    mediopie: float
    retropie: float
    indice_arco: float
    arch_type: str
    total_load: float
    arch_score: int
    contact_area: Optional[ContactArea] = None
    navicular_angle: Optional[float] = None
    rearfoot_angle: Optional[float] = None
    midfoot_pressure_ratio: Optional[float] = None
    rearfoot_alignment: str = "no medido"
    quality_status: str = "ok"
    quality_warnings: Tuple[str, ...] = ()


def arch_score(
    navicular: Optional[float],
    midfoot_ratio: Optional[float],
    rearfoot: Optional[float],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> int:
    """Weighted evidence for flat (+) or high (-) arch; absent inputs add nothing."""
    score = 0

    # Structural signal (medial view)
    if navicular is not None:
        if navicular > config.navicular_flat_deg:
            score += config.navicular_weight
        elif navicular < config.navicular_high_deg:
            score -= config.navicular_weight

    # Functional signal (midfoot contact)
    if midfoot_ratio is not None:
        if midfoot_ratio > config.midfoot_flat_ratio:
            score += config.midfoot_weight
        elif midfoot_ratio < config.midfoot_high_ratio:
            score -= config.midfoot_weight

    # Rearfoot alignment (posterior view): valgus goes with flat foot
    if rearfoot is not None:
        if rearfoot > config.rearfoot_valgus_deg:
            score += config.rearfoot_weight
        elif rearfoot < config.rearfoot_varus_deg:
            score -= config.rearfoot_weight

    return score


def classify_score(score: int, config: AnalysisConfig = DEFAULT_CONFIG) -> str:
    if score >= config.plano_min_score:
        return "plano"
    if score <= config.cavo_max_score:
        return "cavo"
    return "neutro"


def classify_arch(
    navicular: Optional[float],
    midfoot_ratio: Optional[float],
    rearfoot: Optional[float],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> str:
    """Return 'plano', 'cavo' or 'neutro'."""
    return classify_score(arch_score(navicular, midfoot_ratio, rearfoot, config), config)


def contact_area(
    foot_length_cm: Optional[float],
    selection: Optional[SelectionRegion],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Optional[ContactArea]:
    """Estimate contact area using the foot length as calibration along the selection height.

    Returns None without a foot length, without a selection, or when the
    selection height is not positive.
    """
    if not foot_length_cm or selection is None:
        return None
    if selection.height <= 0:
        return None

    scale = float(foot_length_cm) / float(selection.height)
    width_cm = float(selection.width) * scale
    area_cm2 = float(foot_length_cm) * width_cm * config.fill_factor
    return ContactArea(length=float(foot_length_cm), width=width_cm, area=area_cm2)


def compute_metrics(
    luminosity: np.ndarray,
    side: str,
    selection: Optional[SelectionRegion] = None,
    foot_length_cm: Optional[float] = None,
    triangle: Optional[NavicularTriangle] = None,
    lines: Optional[PosteriorLines] = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> FootMetrics:
    """Combine pressure regions, angles and calibration into one ``FootMetrics``."""
    check_side(side)
    warnings: List[str] = []

    distribution = analyze_pressure(luminosity, config)
    if distribution.insufficient_contact:
        warnings.append("Sin contacto suficiente en la selección; distribución neutra por defecto.")

    nav = navicular_angle(triangle) if triangle is not None else None
    if triangle is None:
        warnings.append("Vista medial sin marcar; ángulo navicular no medido.")
    elif nav == 0.0:
        warnings.append("Triángulo navicular degenerado (puntos coincidentes).")

    rear = rearfoot_angle(lines, side) if lines is not None else None
    if lines is None:
        warnings.append("Vista posterior sin marcar; ángulo de retropié no medido.")

    # a degenerate triangle reports 0° but carries no arch evidence
    nav_evidence = None if nav == 0.0 else nav
    score = arch_score(nav_evidence, distribution.midfoot_pressure_ratio, rear, config)
    arch_type = classify_score(score, config)
    area = contact_area(foot_length_cm, selection, config)

    logger.info(
        "Pie %s: arco %s (score %d) | navicular %s | retropié %s",
        side,
        arch_type,
        score,
        "n/a" if nav is None else f"{nav:.1f}°",
        "n/a" if rear is None else f"{rear:.1f}°",
    )

    return FootMetrics(
        foot_side=side,
        antepie=distribution.antepie,
        mediopie=distribution.mediopie,
        retropie=distribution.retropie,
        indice_arco=distribution.indice_arco,
        arch_type=arch_type,
        total_load=distribution.total_load,
        arch_score=score,
        contact_area=area,
        navicular_angle=nav,
        rearfoot_angle=rear,
        midfoot_pressure_ratio=distribution.midfoot_pressure_ratio,
        rearfoot_alignment=rearfoot_alignment(rear, config),
        quality_status="ok" if not warnings else "warn",
        quality_warnings=tuple(warnings),
    )
