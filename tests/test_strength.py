import numpy as np
import pytest

from susan_edge_detection.kernel import kernel_geometry
from susan_edge_detection.preprocess import as_brightness, pad_replicate
from susan_edge_detection.strength import (
    best_uint_dtype,
    edge_strength,
    normalise_strength,
    usan_area,
)


# ---------------------------------------------------------------------
# Uniform input
# ---------------------------------------------------------------------
@pytest.mark.parametrize("value", [0.0, 37.5, 255.0])
def test_uniform_image_has_no_edges(value):
    img = np.full((16, 12), value)
    edg = edge_strength(img, norm_range=0)
    assert edg.dtype == np.float64
    assert not edg.any()


def test_uniform_image_normalised_stays_zero():
    edg = edge_strength(np.full((8, 8), 90, dtype=np.uint8))
    assert edg.dtype == np.uint8
    assert not edg.any()


def test_single_pixel_image():
    edg = edge_strength(np.array([[12.0]]), norm_range=0)
    assert edg.shape == (1, 1)
    assert edg[0, 0] == 0.0


# ---------------------------------------------------------------------
# Step edge
# ---------------------------------------------------------------------
def test_vertical_step_strength_hugs_the_boundary(vertical_step):
    edg = edge_strength(vertical_step, norm_range=0)
    assert edg.shape == vertical_step.shape

    # 22 of the 37 kernel cells lie on the nucleus' side: 27.75 − 22
    np.testing.assert_allclose(edg[:, 9], 5.75)
    np.testing.assert_allclose(edg[:, 10], 5.75)
    assert not edg[:, :9].any()
    assert not edg[:, 11:].any()

    cols = np.nonzero(edg.any(axis=0))[0]
    assert cols.min() >= 10 - 3 and cols.max() < 10 + 3


def test_vertical_step_normalised(vertical_step):
    edg = edge_strength(vertical_step)
    assert edg.dtype == np.uint8
    assert edg.max() == 255
    assert set(np.unique(edg).tolist()) == {0, 255}


def test_rgb_input_is_reduced_to_gray(vertical_step):
    rgb = np.dstack([vertical_step] * 3).astype(np.uint8)
    np.testing.assert_array_equal(
        edge_strength(rgb, norm_range=0), edge_strength(vertical_step, norm_range=0)
    )


def test_low_contrast_step_is_not_an_edge():
    img = np.full((12, 12), 100.0)
    img[:, 6:] = 103.0
    assert not edge_strength(img, threshold=27, norm_range=0).any()


# ---------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------
@pytest.mark.parametrize(
    "norm_range, dtype",
    [(1, np.uint8), (255, np.uint8), (256, np.uint16), (1000, np.uint16),
     (65535, np.uint16), (65536, np.uint32), (2 ** 32, np.uint64)],
)
def test_best_uint_dtype(norm_range, dtype):
    assert best_uint_dtype(norm_range) == np.dtype(dtype)


def test_best_uint_dtype_too_large():
    with pytest.raises(ValueError):
        best_uint_dtype(2 ** 64)


@pytest.mark.parametrize("norm_range", [1, 7, 255, 1000, 70000])
def test_normalisation_bound(noisy_image, norm_range):
    edg = edge_strength(noisy_image, norm_range=norm_range)
    assert edg.dtype == best_uint_dtype(norm_range)
    assert int(edg.max()) == norm_range
    assert int(edg.min()) >= 0
    assert np.iinfo(edg.dtype).max >= norm_range


@pytest.mark.parametrize("norm_range", [2 ** 32 + 1, 2 ** 53 + 1, 2 ** 63 + 1, 2 ** 64 - 1])
def test_normalisation_bound_wide_ranges(vertical_step, norm_range):
    edg = edge_strength(vertical_step, norm_range=norm_range)
    assert edg.dtype == np.uint64
    assert int(edg.max()) == norm_range
    assert int(edg[:, 9].min()) == norm_range
    assert not edg[:, :9].any()


def test_normalise_wide_range_rounds_exactly():
    raw = np.array([[0.0, 1.0, 2.0]])
    out = normalise_strength(raw, 2 ** 64 - 1)
    assert [int(v) for v in out[0]] == [0, 2 ** 63, 2 ** 64 - 1]


def test_normalise_rounds_half_away_from_zero():
    raw = np.array([[0.0, 0.5, 1.5, 4.0]])
    np.testing.assert_array_equal(normalise_strength(raw, 4), [[0, 1, 2, 4]])


def test_normalise_all_zero_map():
    out = normalise_strength(np.zeros((3, 3)), 1000)
    assert out.dtype == np.uint16
    assert not out.any()


# ---------------------------------------------------------------------
# Connectivity refinement
# ---------------------------------------------------------------------
def test_usan_area_counts_detached_island(two_islands):
    geom = kernel_geometry(3)
    padded = pad_replicate(as_brightness(two_islands), 3)
    area, nonzero = usan_area(padded, geom, 27.0)
    assert area[3, 3] == pytest.approx(12.0)
    assert nonzero[3, 3] == 12


def test_connectivity_shrinks_area_and_raises_strength(two_islands):
    plain = edge_strength(two_islands, norm_range=0)
    connected = edge_strength(two_islands, norm_range=0, connected=True)
    assert plain[3, 3] == pytest.approx(27.75 - 12)
    assert connected[3, 3] == pytest.approx(27.75 - 9)
    assert connected[3, 3] >= plain[3, 3]


def test_connectivity_never_lowers_strength(noisy_image):
    plain = edge_strength(noisy_image, threshold=20, norm_range=0)
    connected = edge_strength(noisy_image, threshold=20, norm_range=0, connected=True)
    assert np.all(connected >= plain - 1e-9)


def test_connectivity_on_clean_step_changes_nothing(vertical_step):
    np.testing.assert_allclose(
        edge_strength(vertical_step, norm_range=0, connected=True),
        edge_strength(vertical_step, norm_range=0),
    )


# ---------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------
@pytest.mark.parametrize("connected", [False, True])
def test_repeated_calls_are_bit_identical(noisy_image, connected):
    a = edge_strength(noisy_image, threshold=15, connected=connected)
    b = edge_strength(noisy_image, threshold=15, connected=connected)
    assert a.dtype == b.dtype
    np.testing.assert_array_equal(a, b)


def test_input_is_not_modified(vertical_step):
    before = vertical_step.copy()
    edge_strength(vertical_step)
    np.testing.assert_array_equal(vertical_step, before)


# ---------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------
@pytest.mark.parametrize(
    "image",
    [np.zeros(5), np.zeros((4, 4, 4)), np.zeros((2, 3, 3, 3)), np.zeros((0, 4))],
)
def test_bad_rank_rejected(image):
    with pytest.raises(ValueError):
        edge_strength(image)


def test_non_numeric_rejected():
    with pytest.raises(TypeError):
        edge_strength(np.zeros((4, 4), dtype=complex))


def test_nan_rejected():
    img = np.zeros((4, 4))
    img[1, 1] = np.nan
    with pytest.raises(ValueError):
        edge_strength(img)


@pytest.mark.parametrize(
    "kwargs",
    [{"threshold": 0}, {"threshold": -3.0}, {"threshold": float("inf")},
     {"radius": 0}, {"radius": 1.5}, {"norm_range": -1}, {"norm_range": 2.5},
     {"norm_range": 2 ** 64}],
)
def test_bad_parameters_rejected(kwargs):
    with pytest.raises(ValueError):
        edge_strength(np.zeros((4, 4)), **kwargs)
