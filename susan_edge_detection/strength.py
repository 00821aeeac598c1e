"""
strength.py
===========

SUSAN **edge‑strength** map.

For every pixel p with brightness v_p the similarity of each masked
neighbour q is

    w_q = exp(−((v_q − v_p) / TR)⁶)

a smooth stand‑in for a hard |v_q − v_p| ≤ TR test: ≈1 for near‑identical
brightness, collapsing to 0 within a few multiples of TR.  The USAN area
is Σ w_q over the circular kernel (nucleus included), and the edge
strength is the deficit against the geometric threshold

    strength = max(0, 3·KArea/4 − USAN_AREA)

Borders are handled with edge‑replicated padding so every pixel has a full
window.

With ``connected=True`` the neighbours that are not 8‑connected to the
nucleus are dropped before summing (see ``connectivity.py``).  This is an
improvement over the original SUSAN technique, and an expensive one: every
qualifying pixel costs an extra flood fill over its window.

Implementation notes
--------------------
* The unrestricted area is accumulated for the whole image one kernel
  offset at a time, which is the same per‑pixel sum without a Python loop
  over pixels.
* Only pixels that qualify for the connectivity refinement are revisited
  window by window, reusing one scratch buffer.

Public API
----------
* `edge_strength(image, threshold=27, radius=3, norm_range=255, connected=False)`
* `normalise_strength(strength, norm_range)`
* `best_uint_dtype(norm_range)`
"""
from __future__ import annotations

import math
from numbers import Integral, Real
from typing import Tuple

import numpy as np

from .connectivity import needs_connectivity, restrict_to_nucleus
from .kernel import KernelGeometry, check_radius, kernel_geometry
from .preprocess import as_brightness, check_image, pad_replicate

__all__ = [
    "edge_strength",
    "normalise_strength",
    "best_uint_dtype",
    "usan_area",
]

_UINT_TYPES = (np.uint8, np.uint16, np.uint32, np.uint64)
_FLOAT_EXACT = 2 ** 53


# ---------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------
def _check_threshold(threshold) -> float:
    if isinstance(threshold, bool) or not isinstance(threshold, Real):
        raise ValueError(f"Brightness threshold must be a number, got {threshold!r}")
    threshold = float(threshold)
    if not math.isfinite(threshold) or threshold <= 0:
        raise ValueError(f"Brightness threshold must be > 0, got {threshold}")
    return threshold


def _check_norm_range(norm_range) -> int:
    if isinstance(norm_range, bool) or not isinstance(norm_range, Integral):
        raise ValueError(f"Normalisation range must be an integer, got {norm_range!r}")
    if norm_range < 0:
        raise ValueError(f"Normalisation range must be ≥ 0, got {norm_range}")
    return int(norm_range)


# ---------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------
def best_uint_dtype(norm_range: int) -> np.dtype:
    """
    Smallest unsigned integer dtype able to hold *norm_range*.

    Raises
    ------
    ValueError
        If *norm_range* does not fit in 64 bits.
    """
    for dt in _UINT_TYPES:
        if norm_range <= np.iinfo(dt).max:
            return np.dtype(dt)
    raise ValueError(f"Normalisation range {norm_range} does not fit in uint64")


def normalise_strength(strength: np.ndarray, norm_range: int) -> np.ndarray:
    """
    Rescale *strength* to integers in [0, *norm_range*].

    The maximum maps to *norm_range*; values are rounded half away from
    zero.  An all‑zero map (uniform image) stays all zero.

    Returns
    -------
    np.ndarray – dtype from :func:`best_uint_dtype`.
    """
    norm_range = _check_norm_range(norm_range)
    dtype = best_uint_dtype(norm_range)
    peak = float(strength.max()) if strength.size else 0.0
    if peak <= 0.0:
        return np.zeros(strength.shape, dtype=dtype)

    # the peak cells divide to exactly 1.0
    frac = strength / peak
    if norm_range <= _FLOAT_EXACT:
        scaled = np.floor(frac * norm_range + 0.5)
        np.clip(scaled, 0.0, norm_range, out=scaled)
        return scaled.astype(dtype)

    # float64 cannot represent norm_range: round the fraction to 53 bits
    # and finish the scaling with Python ints
    steps = np.floor(frac * _FLOAT_EXACT + 0.5).astype(np.int64)
    exact = (steps.astype(object) * norm_range + _FLOAT_EXACT // 2) // _FLOAT_EXACT
    return exact.astype(dtype)


# ---------------------------------------------------------------------
# USAN area
# ---------------------------------------------------------------------
def _similarity(diff: np.ndarray, threshold: float) -> np.ndarray:
    """In‑place exp(−(diff/threshold)⁶); huge differences underflow to 0."""
    diff /= threshold
    with np.errstate(over="ignore"):
        np.power(diff, 6, out=diff)
    np.negative(diff, out=diff)
    np.exp(diff, out=diff)
    return diff


def usan_area(
    padded: np.ndarray,
    geom: KernelGeometry,
    threshold: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Unrestricted USAN area and number of non‑zero weights for every pixel.

    Parameters
    ----------
    padded : np.ndarray
        Offset brightness with *geom.radius* replicated border pixels.
    geom : KernelGeometry
    threshold : float
        Brightness threshold TR.

    Returns
    -------
    area : np.ndarray[float64]   – Σ w_q, shape of the unpadded image
    nonzero : np.ndarray[int64]  – count of w_q ≠ 0
    """
    kr = geom.radius
    m, n = padded.shape[0] - 2 * kr, padded.shape[1] - 2 * kr
    nucleus = padded[kr:kr + m, kr:kr + n]

    area = np.zeros((m, n), dtype=np.float64)
    nonzero = np.zeros((m, n), dtype=np.int64)
    weight = np.empty((m, n), dtype=np.float64)

    for dy, dx in geom.offsets:
        neighbour = padded[kr + dy:kr + dy + m, kr + dx:kr + dx + n]
        np.subtract(neighbour, nucleus, out=weight)
        _similarity(weight, threshold)
        area += weight
        nonzero += weight != 0.0
    return area, nonzero


def _connected_area(
    padded: np.ndarray,
    geom: KernelGeometry,
    threshold: float,
    area: np.ndarray,
    nonzero: np.ndarray,
) -> int:
    """
    Recompute *area* in place for the pixels whose USAN may be split.

    Returns the number of refined pixels.
    """
    kr, kw = geom.radius, geom.width
    mask = geom.mask.astype(np.float64)
    window = np.empty((kw, kw), dtype=np.float64)

    candidates = np.argwhere(needs_connectivity(nonzero, geom.area, kr))
    for i, j in candidates:
        np.subtract(padded[i:i + kw, j:j + kw], padded[i + kr, j + kr], out=window)
        _similarity(window, threshold)
        window *= mask
        restrict_to_nucleus(window, geom.area, kr)
        area[i, j] = window.sum()
    return len(candidates)


# ---------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------
def edge_strength(
    image: np.ndarray,
    threshold: float = 27.0,
    radius: int = 3,
    norm_range: int = 255,
    connected: bool = False,
) -> np.ndarray:
    """
    Compute the SUSAN edge‑strength map of *image*.

    Parameters
    ----------
    image : np.ndarray
        Grayscale (H×W) or RGB (H×W×3) image, any real dtype.  Brightness
        is used on its own scale, so *threshold* must match it
        (the default suits [0,255] images).
    threshold : float, default=27
        Brightness threshold TR (> 0).
    radius : int, default=3
        USAN kernel radius KR, nucleus excluded (≥ 1).
    norm_range : int, default=255
        Rescale the map to integers in [0, norm_range]; 0 keeps the raw
        float64 strengths.
    connected : bool, default=False
        Drop USAN pixels not 8‑connected to the nucleus.  Slow.

    Returns
    -------
    strength : np.ndarray, shape (H, W)
        float64 ≥ 0 when *norm_range* is 0, otherwise the smallest
        unsigned integer dtype holding *norm_range*.  0 means "no edge".

    Raises
    ------
    ValueError, TypeError
        Invalid image or parameters, before any computation.
    """
    check_image(image)
    threshold = _check_threshold(threshold)
    radius = check_radius(radius)
    norm_range = _check_norm_range(norm_range)
    best_uint_dtype(norm_range)

    geom = kernel_geometry(radius)
    padded = pad_replicate(as_brightness(image), radius)

    area, nonzero = usan_area(padded, geom, threshold)
    if connected:
        _connected_area(padded, geom, threshold, area, nonzero)
    del padded

    gt = geom.geometric_threshold
    strength = np.where(area < gt, gt - area, 0.0)

    if norm_range > 0:
        return normalise_strength(strength, norm_range)
    return strength
