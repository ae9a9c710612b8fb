import numpy as np
import pytest

from pisada.heatmap import gradient_color, heatmap_positions, percentile_bounds, render_heatmap


def test_background_is_pure_black(luminosity_of):
    plane = np.array([[0, 5, 10, 11, 200, 255]], dtype=np.uint8)
    heat = render_heatmap(luminosity_of(plane))
    assert heat.shape == (1, 6, 3)
    for i in range(3):
        assert tuple(heat[0, i]) == (0, 0, 0)
    assert any(tuple(heat[0, i]) != (0, 0, 0) for i in range(3, 6))


def test_all_background_renders_black(luminosity_of):
    heat = render_heatmap(luminosity_of(np.full((4, 4), 10)))
    assert not heat.any()


def test_gradient_stops():
    colors = gradient_color(np.array([0.0, 0.25, 0.5, 0.75, 1.0]))
    expected = [(0, 0, 255), (0, 255, 255), (0, 255, 0), (255, 255, 0), (255, 0, 0)]
    np.testing.assert_allclose(colors, expected)


def test_gradient_midpoint_interpolates():
    assert tuple(gradient_color(np.array([0.125]))[0]) == pytest.approx((0, 127.5, 255))


def test_percentile_bounds_index_floor():
    values = np.arange(11, 111)  # 100 values
    assert percentile_bounds(values) == (13, 109)


def test_equal_bounds_use_mid_position(luminosity_of):
    positions = heatmap_positions(luminosity_of(np.full((3, 3), 120)))
    assert np.allclose(positions, 0.5 ** 0.6)


def test_monotonic_luma_never_goes_back_in_gradient(luminosity_of):
    plane = np.arange(11, 256, dtype=np.uint8)[None, :]
    positions = heatmap_positions(luminosity_of(plane))[0]
    assert np.all(np.diff(positions) >= 0)
    assert positions[0] == pytest.approx(0.0)
    assert positions[-1] == pytest.approx(1.0)

    heat = render_heatmap(luminosity_of(plane))[0]
    assert tuple(heat[0]) == (0, 0, 255)
    assert tuple(heat[-1]) == (255, 0, 0)


def test_gamma_expands_low_end(luminosity_of):
    # bounds 20/220 from a flat spread; t=0.25 maps to 0.25**0.6
    plane = np.linspace(20, 220, 201).round().astype(np.uint8)[None, :]
    positions = heatmap_positions(luminosity_of(plane))[0]
    lo, hi = percentile_bounds(plane[plane > 10])
    t = (70 - lo) / (hi - lo)
    idx = int(np.where(plane[0] == 70)[0][0])
    assert positions[idx] == pytest.approx(t ** 0.6)
