import numpy as np
import pytest


def make_footprint(height=200, width=100, heel=200, mid=120, fore=240, mid_half_width=15):
    """Synthetic plantar photo (RGB): light sole on a black background.

    Row 0 is the heel. The midfoot band is narrower than the rest so the
    midfoot contact ratio is predictable.
    """
    img = np.zeros((height, width, 3), dtype=np.uint8)
    cx = width // 2
    rear_end = int(np.ceil(height * 0.35))
    fore_start = int(np.ceil(height * 0.65))
    img[:rear_end, cx - 30 : cx + 30] = heel
    img[rear_end:fore_start, cx - mid_half_width : cx + mid_half_width] = mid
    img[fore_start:, cx - 40 : cx + 40] = fore
    return img


@pytest.fixture
def footprint():
    return make_footprint()


@pytest.fixture
def luminosity_of():
    def _build(plane):
        plane = np.asarray(plane, dtype=np.uint8)
        return np.repeat(plane[:, :, None], 3, axis=2)

    return _build
