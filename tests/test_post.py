import math

import numpy as np
import pytest

from susan_edge_detection.post import (
    orientation_to_color,
    overlay,
    strength_to_uint8,
    thin_edges,
)


def test_strength_to_uint8_scales_to_full_range():
    out = strength_to_uint8(np.array([[0.0, 1.0], [4.0, 2.0]]))
    assert out.dtype == np.uint8
    assert out.max() == 255 and out[0, 0] == 0
    assert out[0, 1] == 64


def test_strength_to_uint8_zero_map():
    assert not strength_to_uint8(np.zeros((3, 3), dtype=np.uint16)).any()


def test_thin_edges_is_subset_of_support():
    edg = np.zeros((12, 12), dtype=np.uint8)
    edg[:, 5:8] = 200
    thin = thin_edges(edg)
    assert thin.dtype == bool
    assert thin.any()
    assert not (thin & (edg == 0)).any()
    assert thin.sum() < np.count_nonzero(edg)


def test_orientation_to_color():
    theta = np.zeros((4, 4))
    theta[1, 1] = math.pi / 2
    theta[2, 2] = math.pi
    out = orientation_to_color(theta)
    assert out.shape == (4, 4, 3) and out.dtype == np.uint8
    assert not out[0, 0].any()
    assert out[1, 1].any() and out[2, 2].any()
    assert not np.array_equal(out[1, 1], out[2, 2])


def test_orientation_to_color_uses_strength_as_value():
    theta = np.full((2, 2), math.pi / 2)
    edg = np.array([[255, 64], [0, 128]], dtype=np.uint8)
    out = orientation_to_color(theta, edg)
    assert out[0, 0].max() > out[0, 1].max() > 0
    assert not out[1, 0].any()


def test_overlay():
    img = np.full((5, 5), 128, dtype=np.uint8)
    mask = np.zeros((5, 5), dtype=bool)
    mask[2, :] = True
    out = overlay(img, mask, color=(0, 0, 255), alpha=1.0)
    assert out.shape == (5, 5, 3) and out.dtype == np.uint8
    np.testing.assert_array_equal(out[2, 0], [0, 0, 255])
    np.testing.assert_array_equal(out[0, 0], [128, 128, 128])


def test_overlay_shape_mismatch():
    with pytest.raises(ValueError):
        overlay(np.zeros((4, 4)), np.zeros((3, 3), dtype=bool))
