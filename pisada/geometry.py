"""Angles from manually placed points: navicular (medial view) and rearfoot (posterior view)."""

from __future__ import annotations

import math
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, AnalysisConfig

FOOT_SIDES = ("left", "right")


class Point(NamedTuple):
    x: float
    y: float

    @classmethod
    def parse(cls, value: Any) -> "Point":
        """Accept ``{"x": .., "y": ..}`` or an ``(x, y)`` pair."""
        if isinstance(value, dict):
            return cls(float(value["x"]), float(value["y"]))
        x, y = value
        return cls(float(x), float(y))


class NavicularTriangle(NamedTuple):
    """Heel, forefoot and navicular landmarks; ``p3`` is the vertex."""

    p1: Point
    p2: Point
    p3: Point

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NavicularTriangle":
        return cls(Point.parse(data["p1"]), Point.parse(data["p2"]), Point.parse(data["p3"]))


class PosteriorLines(NamedTuple):
    """Calf and heel bisection lines, each as two points."""

    calf: Tuple[Point, Point]
    heel: Tuple[Point, Point]

    @classmethod
    def from_dict(cls, data: Dict[str, Sequence[Any]]) -> "PosteriorLines":
        calf = data["calf"]
        heel = data["heel"]
        if len(calf) != 2 or len(heel) != 2:
            raise ValueError("Las líneas de pantorrilla y talón requieren exactamente dos puntos cada una.")
        return cls(
            (Point.parse(calf[0]), Point.parse(calf[1])),
            (Point.parse(heel[0]), Point.parse(heel[1])),
        )


def check_side(side: str) -> str:
    if side not in FOOT_SIDES:
        raise ValueError(f"Lado de pie inválido: {side!r} (usar 'left' o 'right').")
    return side


def navicular_angle(triangle: NavicularTriangle) -> float:
    """Angle at ``p3`` between ``p1`` and ``p2``, in degrees.

    A zero-length arm is a degenerate triangle and yields 0.0 instead of an
    error.
    """
    p1, p2, p3 = triangle
    ax, ay = p1.x - p3.x, p1.y - p3.y
    bx, by = p2.x - p3.x, p2.y - p3.y
    mag_a = math.hypot(ax, ay)
    mag_b = math.hypot(bx, by)
    if mag_a == 0 or mag_b == 0:
        return 0.0
    cos_theta = max(-1.0, min(1.0, (ax * bx + ay * by) / (mag_a * mag_b)))
    return math.degrees(math.acos(cos_theta))


def _line_angle(p0: Point, p1: Point) -> float:
    return math.atan2(p1.y - p0.y, p1.x - p0.x)


def normalize_degrees(angle: float) -> float:
    """Wrap an angle into (-180, 180]."""
    wrapped = math.fmod(angle, 360.0)
    if wrapped > 180.0:
        wrapped -= 360.0
    elif wrapped <= -180.0:
        wrapped += 360.0
    return wrapped


def rearfoot_angle(lines: PosteriorLines, side: str) -> float:
    """Signed heel-vs-calf deviation in degrees: positive valgus, negative varus.

    Image geometry gives opposite raw signs for left and right feet, so the
    sign is inverted for the right foot.
    """
    check_side(side)
    angle_calf = _line_angle(*lines.calf)
    angle_heel = _line_angle(*lines.heel)
    diff = normalize_degrees(math.degrees(angle_heel - angle_calf))
    if diff == 0:
        return 0.0
    return -diff if side == "right" else diff


def rearfoot_alignment(angle: Optional[float], config: AnalysisConfig = DEFAULT_CONFIG) -> str:
    """Label a rearfoot angle as valgo / varo / neutro ('no medido' if absent)."""
    if angle is None:
        return "no medido"
    if angle > config.rearfoot_valgus_deg:
        return "valgo"
    if angle < config.rearfoot_varus_deg:
        return "varo"
    return "neutro"
