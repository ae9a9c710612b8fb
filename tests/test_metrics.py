import dataclasses

import numpy as np
import pytest

from conftest import make_footprint
from pisada.config import AnalysisConfig
from pisada.geometry import NavicularTriangle, Point, PosteriorLines
from pisada.metrics import arch_score, classify_arch, compute_metrics, contact_area
from pisada.preprocess import to_luminosity
from pisada.region import SelectionRegion


@pytest.mark.parametrize(
    "nav, ratio, rear, score, arch",
    [
        (160, 0.5, 6, 4, "plano"),
        (130, 0.1, -6, -4, "cavo"),
        (145, 0.25, 0, 0, "neutro"),
        (160, None, None, 2, "plano"),
        (None, 0.5, 6, 2, "plano"),
        (None, 0.1, None, -1, "neutro"),
        (155, 0.40, 4, 0, "neutro"),
        (135, 0.15, -4, 0, "neutro"),
    ],
)
def test_arch_classification(nav, ratio, rear, score, arch):
    assert arch_score(nav, ratio, rear) == score
    assert classify_arch(nav, ratio, rear) == arch


def test_zero_midfoot_ratio_is_evidence_not_absence():
    assert arch_score(None, 0.0, None) == -1


def test_contact_area_example():
    selection = SelectionRegion(0, 0, 200, 500, 600, 800, 600, 800)
    area = contact_area(25, selection)
    assert area.length == 25
    assert area.width == pytest.approx(10.0)
    assert area.area == pytest.approx(187.5)


def test_contact_area_missing_inputs():
    selection = SelectionRegion(0, 0, 200, 500, 600, 800, 600, 800)
    assert contact_area(None, selection) is None
    assert contact_area(25, None) is None
    assert contact_area(25, dataclasses.replace(selection, height=0)) is None


def test_compute_metrics_full_record():
    lum = to_luminosity(make_footprint())
    selection = SelectionRegion(0, 0, 100, 200, 100, 200, 100, 200)
    tri = NavicularTriangle(Point(-1, 0), Point(1, 0.1), Point(0, 0))  # ~174°
    lines = PosteriorLines(calf=(Point(0, 0), Point(0, 100)), heel=(Point(0, 0), Point(0, 100)))
    m = compute_metrics(lum, "right", selection=selection, foot_length_cm=25, triangle=tri, lines=lines)

    assert m.foot_side == "right"
    assert m.antepie + m.mediopie + m.retropie == pytest.approx(100.0)
    assert m.navicular_angle > 155
    assert m.rearfoot_angle == 0
    assert m.rearfoot_alignment == "neutro"
    assert m.midfoot_pressure_ratio == pytest.approx(0.29)
    assert m.arch_score == 2
    assert m.arch_type == "plano"
    assert m.contact_area.area == pytest.approx(25 * 12.5 * 0.75)
    assert m.quality_status == "ok"
    assert m.quality_warnings == ()


def test_compute_metrics_missing_geometry_and_contact():
    lum = to_luminosity(np.zeros((60, 60, 3), dtype=np.uint8))
    m = compute_metrics(lum, "left")
    assert m.navicular_angle is None
    assert m.rearfoot_angle is None
    assert m.contact_area is None
    assert m.total_load == 1
    assert m.midfoot_pressure_ratio == 0.33
    assert m.arch_type == "neutro"
    assert m.quality_status == "warn"
    assert len(m.quality_warnings) == 3


def test_metrics_are_immutable():
    m = compute_metrics(to_luminosity(make_footprint()), "left")
    with pytest.raises(dataclasses.FrozenInstanceError):
        m.arch_type = "cavo"


def test_thresholds_come_from_config():
    config = AnalysisConfig(navicular_flat_deg=170.0)
    assert arch_score(160, None, None) == 2
    assert arch_score(160, None, None, config) == 0


def test_degenerate_triangle_reports_zero_but_adds_no_arch_evidence():
    lum = to_luminosity(make_footprint())
    tri = NavicularTriangle(Point(10, 10), Point(40, 60), Point(10, 10))
    m = compute_metrics(lum, "left", triangle=tri)

    assert m.navicular_angle == 0.0
    assert m.arch_score == 0
    assert m.arch_type == "neutro"
    assert any("degenerado" in w for w in m.quality_warnings)
