import pytest

from utils.helpers import clamp, distance, normalize, rects_overlap


def test_rects_overlap_edges_do_not_touch():
    assert rects_overlap(0, 0, 10, 10, 5, 5, 10, 10)
    assert not rects_overlap(0, 0, 10, 10, 10, 0, 10, 10)
    assert not rects_overlap(0, 0, 10, 10, 0, 20, 10, 10)


def test_normalize_keeps_zero_vector():
    assert normalize(0, 0) == (0.0, 0.0)
    assert normalize(3, 4) == pytest.approx((0.6, 0.8))


def test_distance_and_clamp():
    assert distance(0, 0, 3, 4) == 5.0
    assert clamp(7, -1, 1) == 1
    assert clamp(-7, -1, 1) == -1
    assert clamp(0.5, -1, 1) == 0.5
