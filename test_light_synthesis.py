# test_light_synthesis.py
import numpy as np
import pytest

from envlights.partition import median_variance_cut
from envlights.sat_region import SatRegion
from envlights.summed_area_table import SummedAreaTable
from envlights.synthesis import create_light, create_lights_from_regions


def test_flat_quadrant_lights():
    """Four identical lights centred on the quadrants of a flat 4x4 image"""
    img = np.ones((4, 4, 3), dtype=np.float32)
    sat = SummedAreaTable(img)
    lights = create_lights_from_regions(median_variance_cut(sat, 2), sat)

    assert len(lights) == 4
    expected = [(0.25, 0.25), (0.25, 0.75), (0.75, 0.25), (0.75, 0.75)]
    for light, centroid in zip(lights, expected):
        assert light.centroid == pytest.approx(centroid)
        assert light.lum_average == pytest.approx(lights[0].lum_average)
        assert light.lum_average == pytest.approx(1.0)
        assert light.variance == pytest.approx(0.0, abs=1e-12)
        assert light.color == pytest.approx((1.0, 1.0, 1.0))
        assert light.footprint == pytest.approx((centroid[0] - 0.25, centroid[1] - 0.25, 0.5, 0.5))
        assert light.pixel_count == 4
        assert not light.error


def test_average_color_of_region():
    img = np.zeros((4, 8, 3), dtype=np.float32)
    img[:, :4, 0] = 2.0
    img[:, 4:, 2] = 4.0
    sat = SummedAreaTable(img)

    left = create_light(SatRegion.create(0, 0, 4, 4, sat), sat)
    mixed = create_light(SatRegion.create(2, 0, 4, 2, sat), sat)

    assert left.color == pytest.approx((2.0, 0.0, 0.0))
    assert mixed.color == pytest.approx((1.0, 0.0, 2.0))


def test_centroid_is_luminance_weighted():
    img = np.zeros((1, 4, 3), dtype=np.float32)
    img[0, 0] = 1.0
    img[0, 3] = 3.0
    sat = SummedAreaTable(img)

    light = create_light(SatRegion.create(0, 0, 4, 1, sat), sat)

    # (0.5 * 1 + 3.5 * 3) / 4 pixels, over a width of 4
    assert light.centroid[0] == pytest.approx(2.75 / 4)
    assert light.centroid[1] == pytest.approx(0.5)
    assert light.sum == pytest.approx(4.0)
    # luminance values 1, 0, 0, 3
    assert light.variance == pytest.approx(10 / 4 - 1.0)


def test_negative_pixels_do_not_pull_centroid_out():
    """Near-cancelling negative luminance keeps the centre on the bright pixel"""
    img = np.zeros((1, 4, 3), dtype=np.float32)
    img[0, 0] = -1.0
    img[0, 3] = 1.01
    sat = SummedAreaTable(img)

    light = create_light(SatRegion.create(0, 0, 4, 1, sat), sat)

    u, v = light.centroid
    assert 0.0 <= u <= 1.0
    assert u == pytest.approx(3.5 / 4)
    assert v == pytest.approx(0.5)
    assert not light.error


def test_negative_energy_region_with_bright_pixel():
    img = np.zeros((2, 4, 3), dtype=np.float32)
    img[:, 0] = -5.0
    img[1, 2] = 1.0
    sat = SummedAreaTable(img)

    light = create_light(SatRegion.create(0, 0, 4, 2, sat), sat)

    assert light.sum < 0
    assert light.centroid == pytest.approx((2.5 / 4, 1.5 / 2))


def test_black_region_uses_geometric_centre():
    sat = SummedAreaTable(np.zeros((4, 4, 3), dtype=np.float32))
    light = create_light(SatRegion.create(0, 0, 2, 4, sat), sat)

    assert light.centroid == pytest.approx((0.25, 0.5))
    assert light.sum == 0.0
    assert not light.error


def test_empty_region_sets_error_flag():
    sat = SummedAreaTable(np.ones((4, 4, 3), dtype=np.float32))
    light = create_light(SatRegion(1, 1, 0, 2, sat), sat)

    assert light.error
    assert light.color == (0.0, 0.0, 0.0)
    assert light.centroid == pytest.approx((0.25, 0.5))
    assert light.pixel_count == 0
    assert light.variance == 0.0


def test_lights_below_horizon_are_kept():
    img = np.ones((4, 4, 3), dtype=np.float32)
    sat = SummedAreaTable(img)
    light = create_light(SatRegion.create(0, 2, 4, 2, sat), sat)

    assert light.centroid[1] == pytest.approx(0.75)


def test_candidate_energy_matches_table():
    rng = np.random.default_rng(11)
    img = (rng.random((16, 32, 3)) * 5).astype(np.float32)
    sat = SummedAreaTable(img)
    lights = create_lights_from_regions(median_variance_cut(sat, 5), sat)

    assert sum(l.sum for l in lights) == pytest.approx(sat.total_luminance_sum, rel=1e-9)
    assert sum(l.pixel_count for l in lights) == 16 * 32
