import numpy as np
import pytest

from susan_edge_detection.preprocess import (
    BRIGHTNESS_OFFSET,
    as_brightness,
    check_image,
    pad_constant,
    pad_replicate,
    to_gray,
)


def test_gray_passthrough_is_float64_copy():
    img = np.arange(12, dtype=np.uint8).reshape(3, 4)
    out = to_gray(img)
    assert out.dtype == np.float64
    np.testing.assert_array_equal(out, img)
    out[0, 0] = 99
    assert img[0, 0] == 0


def test_rgb_uses_luma_weights():
    rgb = np.zeros((2, 2, 3), dtype=np.uint8)
    rgb[..., 0] = 255
    np.testing.assert_allclose(to_gray(rgb), 0.299 * 255, rtol=1e-4)
    rgb[..., :] = (10, 20, 30)
    np.testing.assert_allclose(to_gray(rgb), 0.299 * 10 + 0.587 * 20 + 0.114 * 30, rtol=1e-4)


def test_rgb_wide_range_keeps_float64_precision():
    rgb = np.zeros((1, 2, 3), dtype=np.uint32)
    rgb[0, 0] = (2 ** 30 + 1, 2 ** 30 + 1, 2 ** 30 + 1)
    rgb[0, 1] = (2 ** 30, 2 ** 30, 2 ** 30)
    gray = to_gray(rgb)
    assert gray.dtype == np.float64
    assert gray[0, 0] - gray[0, 1] == pytest.approx(1.0, abs=1e-6)


def test_brightness_offset():
    out = as_brightness(np.zeros((2, 2)))
    assert BRIGHTNESS_OFFSET == 255.0
    np.testing.assert_array_equal(out, 255.0)


def test_pad_replicate():
    img = np.array([[1.0, 2.0], [3.0, 4.0]])
    out = pad_replicate(img, 2)
    assert out.shape == (6, 6)
    assert out[0, 0] == 1.0 and out[-1, -1] == 4.0
    np.testing.assert_array_equal(out[2:4, 2:4], img)
    np.testing.assert_array_equal(out[0, 2:4], [1.0, 2.0])


def test_pad_constant():
    img = np.ones((2, 3))
    out = pad_constant(img, 1, value=255.0)
    assert out.shape == (4, 5)
    assert np.all(out[0] == 255.0) and np.all(out[:, -1] == 255.0)
    np.testing.assert_array_equal(out[1:3, 1:4], img)
    assert not pad_constant(img, 2)[0].any()


@pytest.mark.parametrize(
    "img, exc",
    [
        ([[1, 2], [3, 4]], TypeError),
        (np.array([["a"]]), TypeError),
        (np.zeros((2, 2, 4)), ValueError),
        (np.zeros(3), ValueError),
        (np.zeros((3, 0)), ValueError),
        (np.array([[np.inf]]), ValueError),
    ],
)
def test_check_image_rejects(img, exc):
    with pytest.raises(exc):
        check_image(img)


def test_check_image_accepts_bool_and_ints():
    check_image(np.zeros((2, 2), dtype=bool))
    check_image(np.zeros((2, 2, 3), dtype=np.int16))
