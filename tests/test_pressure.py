import numpy as np
import pytest

from conftest import make_footprint
from pisada.config import AnalysisConfig
from pisada.preprocess import to_luminosity
from pisada.pressure import (
    analyze_pressure,
    band_masks,
    midfoot_contact_ratio,
    region_totals,
)

FALLBACK = {
    "antepie": 40,
    "retropie": 40,
    "mediopie": 20,
    "indice_arco": 0.6,
    "total_load": 1,
    "midfoot_pressure_ratio": 0.33,
}


def test_band_boundaries():
    rear, mid, fore = band_masks(100)
    assert rear.sum() == 35 and rear[34] and not rear[35]
    assert mid.sum() == 30 and mid[35] and mid[64]
    assert fore.sum() == 35 and fore[65]


def test_synthetic_footprint_distribution():
    lum = to_luminosity(make_footprint())
    totals = region_totals(lum)
    assert totals.rearfoot_sum == 70 * 60 * 200
    assert totals.midfoot_sum == 60 * 30 * 120
    assert totals.forefoot_sum == 70 * 80 * 240

    dist = analyze_pressure(lum)
    assert dist.retropie == pytest.approx(35.0)
    assert dist.mediopie == pytest.approx(9.0)
    assert dist.antepie == pytest.approx(56.0)
    assert dist.antepie + dist.mediopie + dist.retropie == pytest.approx(100.0, abs=0.01)
    assert dist.midfoot_pressure_ratio == pytest.approx(0.29)
    assert dist.indice_arco == pytest.approx(0.71)
    assert dist.total_load == 2_400_000
    assert not dist.insufficient_contact


def test_percentages_sum_to_100_on_noise(luminosity_of):
    rng = np.random.default_rng(3)
    plane = rng.integers(0, 256, size=(57, 43))
    dist = analyze_pressure(luminosity_of(plane))
    assert dist.antepie + dist.mediopie + dist.retropie == pytest.approx(100.0, abs=0.01)


@pytest.mark.parametrize("value", [0, 20])
def test_no_contact_returns_fallback_record(luminosity_of, value):
    dist = analyze_pressure(luminosity_of(np.full((40, 30), value)))
    assert dist.insufficient_contact
    for key, expected in FALLBACK.items():
        assert getattr(dist, key) == expected


def test_values_at_threshold_are_ignored(luminosity_of):
    plane = np.zeros((10, 10))
    plane[0, 0] = 20
    plane[9, 9] = 21
    totals = region_totals(luminosity_of(plane))
    assert totals.rearfoot_sum == 0
    assert totals.forefoot_sum == 21


def test_single_pixel_rows_do_not_count_as_width(luminosity_of):
    plane = np.zeros((100, 50))
    plane[40, 10] = 200  # single contact pixel: span 0
    plane[50, 5:16] = 200  # span 10
    assert midfoot_contact_ratio(luminosity_of(plane)) == pytest.approx(10 / 50)


def test_arch_index_is_clamped(luminosity_of):
    plane = np.zeros((100, 50))
    plane[:35] = 100
    plane[65:] = 100
    dist = analyze_pressure(luminosity_of(plane))
    assert dist.midfoot_pressure_ratio == 0
    assert dist.indice_arco == 0.9

    plane[35:65] = 100
    dist = analyze_pressure(luminosity_of(plane))
    assert dist.midfoot_pressure_ratio == pytest.approx(49 / 50)
    assert dist.indice_arco == pytest.approx(0.1)


def test_band_fractions_come_from_config(luminosity_of):
    plane = np.full((100, 10), 100)
    dist = analyze_pressure(luminosity_of(plane), AnalysisConfig(rearfoot_end=0.5, forefoot_start=0.5))
    assert dist.retropie == pytest.approx(50.0)
    assert dist.mediopie == 0
    assert dist.antepie == pytest.approx(50.0)
