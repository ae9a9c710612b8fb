"""Traffic-light alert levels and left/right symmetry for the report."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .metrics import FootMetrics

# (red_low, yellow_low, yellow_high, red_high): green inside [yellow_low, yellow_high].
ALERT_THRESHOLDS: Dict[str, Tuple[float, float, float, float]] = {
    "retropie": (15, 25, 40, 50),
    "mediopie": (5, 15, 35, 45),
    "antepie": (20, 30, 45, 55),
    "navicular_angle": (125, 135, 155, 165),
    "rearfoot_angle": (-10, -8, 8, 10),
}

# (green_max_diff, yellow_max_diff)
SYMMETRY_THRESHOLDS: Dict[str, Tuple[float, float]] = {
    "navicular_angle": (5, 10),
    "rearfoot_angle": (4, 8),
    "retropie": (5, 10),
    "mediopie": (5, 10),
    "antepie": (5, 10),
}

SYMMETRY_LABELS = {
    "navicular_angle": "Simetría Arco (Ángulo)",
    "rearfoot_angle": "Simetría Talón (Ángulo)",
    "retropie": "Simetría Carga Retropié",
    "mediopie": "Simetría Carga Mediopié",
    "antepie": "Simetría Carga Antepié",
}


def alert_color(value: Optional[float], thresholds: Tuple[float, float, float, float]) -> str:
    if value is None:
        return "yellow"
    red_low, yellow_low, yellow_high, red_high = thresholds
    if yellow_low <= value <= yellow_high:
        return "green"
    if yellow_high < value <= red_high or red_low <= value < yellow_low:
        return "yellow"
    return "red"


def symmetry_color(a: Optional[float], b: Optional[float], thresholds: Tuple[float, float]) -> str:
    if a is None or b is None:
        return "yellow"
    diff = abs(a - b)
    if diff <= thresholds[0]:
        return "green"
    if diff <= thresholds[1]:
        return "yellow"
    return "red"


def load_balance(right_total: float, left_total: float) -> float:
    """Smaller total load as a percentage of the larger one."""
    largest = max(right_total, left_total)
    if largest <= 0:
        return 0.0
    return min(right_total, left_total) / largest * 100.0


def load_balance_color(right_total: float, left_total: float) -> str:
    if right_total == 0 or left_total == 0:
        return "red"
    balance = load_balance(right_total, left_total)
    if balance >= 90:
        return "green"
    if balance >= 80:
        return "yellow"
    return "red"


def foot_alerts(metrics: FootMetrics) -> Dict[str, str]:
    """Alert color of every thresholded metric of one foot."""
    return {key: alert_color(getattr(metrics, key), bounds) for key, bounds in ALERT_THRESHOLDS.items()}


def compare_feet(right: FootMetrics, left: FootMetrics) -> List[Dict[str, object]]:
    """Rows of the symmetry table: label, absolute difference and color."""
    rows: List[Dict[str, object]] = [
        {
            "key": "total_load",
            "label": "Balance de Carga General",
            "value": load_balance(right.total_load, left.total_load),
            "unit": "%",
            "color": load_balance_color(right.total_load, left.total_load),
        }
    ]
    for key, bounds in SYMMETRY_THRESHOLDS.items():
        a = getattr(right, key)
        b = getattr(left, key)
        rows.append(
            {
                "key": key,
                "label": SYMMETRY_LABELS[key],
                # missing angles count as 0 in the displayed difference, the color stays yellow
                "value": abs((a or 0.0) - (b or 0.0)),
                "unit": "°" if key.endswith("angle") else "%",
                "color": symmetry_color(a, b, bounds),
            }
        )
    return rows
