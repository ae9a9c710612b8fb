"""Empirical constants of the footprint analysis and JSON profile loading."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError


@dataclass(frozen=True)
class AnalysisConfig:
    """Clinical-heuristic thresholds used across the pipeline.

    None of these values are derived: they are tuning constants and can be
    overridden through a JSON profile (see ``load_config``).
    """

    # Region extraction
    min_selection_px: float = 50.0
    max_pixels: int = 40_000_000

    # Heatmap (display only)
    background_threshold: int = 10
    percentile_low: float = 0.02
    percentile_high: float = 0.98
    gamma: float = 0.6

    # Pressure regions, as fractions of image height (row 0 = heel)
    rearfoot_end: float = 0.35
    forefoot_start: float = 0.65
    noise_threshold: int = 20
    arch_index_min: float = 0.1
    arch_index_max: float = 0.9

    # Degraded record used when no pixel exceeds the noise threshold
    fallback_antepie: float = 40.0
    fallback_mediopie: float = 20.0
    fallback_retropie: float = 40.0
    fallback_indice_arco: float = 0.6
    fallback_total_load: float = 1.0
    fallback_midfoot_ratio: float = 0.33

    # Arch scoring
    navicular_flat_deg: float = 155.0
    navicular_high_deg: float = 135.0
    navicular_weight: int = 2
    midfoot_flat_ratio: float = 0.40
    midfoot_high_ratio: float = 0.15
    midfoot_weight: int = 1
    rearfoot_valgus_deg: float = 4.0
    rearfoot_varus_deg: float = -4.0
    rearfoot_weight: int = 1
    plano_min_score: int = 2
    cavo_max_score: int = -2

    # Contact area
    fill_factor: float = 0.75

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> "AnalysisConfig":
        """Check cross-field constraints and return self."""
        if not 0.0 < self.rearfoot_end <= self.forefoot_start < 1.0:
            raise ConfigError("Se requiere 0 < rearfoot_end <= forefoot_start < 1.")
        if not 0.0 <= self.percentile_low <= self.percentile_high < 1.0:
            raise ConfigError("Percentiles de recorte inválidos.")
        if self.gamma <= 0:
            raise ConfigError("gamma debe ser > 0.")
        if self.arch_index_min > self.arch_index_max:
            raise ConfigError("arch_index_min no puede superar arch_index_max.")
        if self.max_pixels <= 0:
            raise ConfigError("max_pixels debe ser > 0.")
        if self.cavo_max_score >= self.plano_min_score:
            raise ConfigError("cavo_max_score debe ser menor que plano_min_score.")
        return self


DEFAULT_CONFIG = AnalysisConfig()


def config_from_dict(data: Dict[str, Any], base: Optional[AnalysisConfig] = None) -> AnalysisConfig:
    """Override ``base`` (default config) with the keys present in ``data``."""
    base = base or DEFAULT_CONFIG
    known = {f.name: f for f in fields(AnalysisConfig)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"Claves de configuración desconocidas: {', '.join(unknown)}")

    overrides: Dict[str, Any] = {}
    for key, value in data.items():
        current = getattr(base, key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"Valor numérico esperado para '{key}', recibido: {value!r}")
        if isinstance(current, int):
            if float(value) != int(value):
                raise ConfigError(f"Valor entero esperado para '{key}', recibido: {value!r}")
            overrides[key] = int(value)
        else:
            overrides[key] = float(value)
    return replace(base, **overrides).validate()


def load_config(path: Optional[Path]) -> AnalysisConfig:
    """Load a JSON profile. ``None`` returns the default configuration."""
    if path is None:
        return DEFAULT_CONFIG
    if not path.exists():
        raise ConfigError(f"No existe el perfil de configuración: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Perfil JSON inválido {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"El perfil debe ser un objeto JSON: {path}")
    return config_from_dict(data)
