"""
orientation.py
==============

Edge **orientation** from a SUSAN edge‑strength map.

The strength map itself is used as the USAN weight: around every edge
pixel the strength window is multiplied by the circular kernel and its
first and second moments give the direction of the edge tangent.

Angle Convention
----------------
Angles are tangents to the edge, counted counter‑clockwise from the
horizontal, in radians within (0, π]:

    θ = π/2   → vertical edge
    θ = π     → horizontal edge

Pixels with zero strength keep the sentinel 0 (orientation undefined).

Cases
-----
With CDX, CDY the weighted centroid offset from the nucleus (CDY counted
upwards):

* **intra‑pixel** (|C| < 1): the edge passes through the nucleus; the
  angle is the principal axis of the second moments,
  sign(DXY)·atan(DY/DX), or π/2 when DX is 0.
* **inter‑pixel** (|C| ≥ 1): the edge passes between pixels; the tangent
  is perpendicular to the centroid offset, π/2 + atan(CDY/CDX), or π when
  CDX is 0.

All window sums are correlations of the map with the pre‑multiplied
coordinate tables of ``kernel.KernelGeometry``, so the whole map is done
with ``scipy.ndimage.correlate``; only pixels that qualify for the
connectivity refinement are revisited one window at a time.

Public API
----------
* `prepare_strength_map(strength_map) -> np.ndarray`
* `edge_orientation(strength_map, radius=3, connected=False) -> np.ndarray`
"""
from __future__ import annotations

from typing import Dict

import numpy as np
from scipy.ndimage import correlate

from .angles import normalize_angles
from .connectivity import needs_connectivity, restrict_to_nucleus
from .kernel import KernelGeometry, check_radius, kernel_geometry
from .preprocess import BRIGHTNESS_OFFSET, check_image, pad_constant, to_gray

__all__ = [
    "prepare_strength_map",
    "edge_orientation",
]

# moment name → KernelGeometry table
_MOMENTS = ("area", "rx", "ry", "dsqx", "dsqy", "rxy")


# ---------------------------------------------------------------------
# Preprocessing
# ---------------------------------------------------------------------
def prepare_strength_map(strength_map: np.ndarray) -> np.ndarray:
    """
    Single‑channel float64 copy of *strength_map* scaled into [0,1].

    Raw and quantised maps (e.g. uint8 in [0,255]) are handled alike: when
    the maximum exceeds 1 the map is divided by it.
    """
    edg = to_gray(strength_map)
    peak = float(edg.max())
    if peak > 1.0:
        edg /= peak
    return edg


def _tables(geom: KernelGeometry) -> Dict[str, np.ndarray]:
    return {
        "area": geom.mask.astype(np.float64),
        "rx": geom.rx,
        "ry": geom.ry,
        "dsqx": geom.dsqx,
        "dsqy": geom.dsqy,
        "rxy": geom.rxy,
    }


def _usan_weights(edg: np.ndarray, radius: int) -> np.ndarray:
    """
    Offset working buffer with *radius* zero‑strength border cells, read
    back relative to the offset.

    The round trip through :data:`BRIGHTNESS_OFFSET` is intended, not a
    no‑op: strengths below the offset's resolution read back as exactly 0
    and keep the sentinel.
    """
    padded = pad_constant(edg + BRIGHTNESS_OFFSET, radius, value=BRIGHTNESS_OFFSET)
    padded -= BRIGHTNESS_OFFSET
    return padded


# ---------------------------------------------------------------------
# Window moments
# ---------------------------------------------------------------------
def _moments(weights: np.ndarray, geom: KernelGeometry) -> Dict[str, np.ndarray]:
    """Masked window sums of *weights* for every unpadded pixel."""
    kr = geom.radius
    m, n = weights.shape[0] - 2 * kr, weights.shape[1] - 2 * kr
    out = {}
    for name, table in _tables(geom).items():
        full = correlate(weights, table, mode="constant", cval=0.0)
        out[name] = full[kr:kr + m, kr:kr + n]
    return out


def _connected_moments(
    weights: np.ndarray,
    geom: KernelGeometry,
    edge: np.ndarray,
    moments: Dict[str, np.ndarray],
) -> int:
    """
    Recompute *moments* in place for edge pixels whose USAN may be split.

    Returns the number of refined pixels.
    """
    kr, kw = geom.radius, geom.width
    tables = _tables(geom)
    mask = tables["area"]

    nonzero = correlate((weights != 0.0).astype(np.float64), mask, mode="constant")
    nonzero = nonzero[kr:kr + edge.shape[0], kr:kr + edge.shape[1]]
    candidates = np.argwhere(edge & needs_connectivity(nonzero, geom.area, kr))

    usan = np.empty((kw, kw), dtype=np.float64)
    for i, j in candidates:
        np.multiply(weights[i:i + kw, j:j + kw], mask, out=usan)
        restrict_to_nucleus(usan, geom.area, kr)
        for name in _MOMENTS:
            moments[name][i, j] = np.sum(tables[name] * usan)
    return len(candidates)


# ---------------------------------------------------------------------
# Angles
# ---------------------------------------------------------------------
def _tangent_angles(mo: Dict[str, np.ndarray]) -> np.ndarray:
    """Raw tangent angle (before normalisation) from per‑pixel moments."""
    area = mo["area"]
    cdx = mo["rx"] / area
    cdy = -mo["ry"] / area

    dx = mo["dsqx"]
    dy = -mo["dsqy"]
    # an axis-aligned blob (DXY == 0) takes the positive branch
    sign = np.where(mo["rxy"] < 0.0, -1.0, 1.0)

    with np.errstate(divide="ignore", invalid="ignore"):
        intra = np.where(dx > 0.0, sign * np.arctan(dy / dx), np.pi / 2)
        inter = np.where(cdx != 0.0, np.pi / 2 + np.arctan(cdy / cdx), np.pi)

    return np.where(np.hypot(cdx, cdy) < 1.0, intra, inter)


# ---------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------
def edge_orientation(
    strength_map: np.ndarray,
    radius: int = 3,
    connected: bool = False,
) -> np.ndarray:
    """
    Compute edge tangent angles from an edge‑strength map.

    Parameters
    ----------
    strength_map : np.ndarray
        Output of :func:`strength.edge_strength` (raw or normalised), or
        any non‑negative H×W / H×W×3 map.
    radius : int, default=3
        USAN kernel radius; use the one the strength map was built with.
    connected : bool, default=False
        Drop USAN pixels not 8‑connected to the nucleus.  Slow.

    Returns
    -------
    theta : np.ndarray[float64], shape (H, W)
        Angles in (0, π] where strength > 0, 0 elsewhere.

    Raises
    ------
    ValueError, TypeError
        Invalid map or radius, before any computation.
    """
    check_image(strength_map)
    radius = check_radius(radius)

    geom = kernel_geometry(radius)
    edg = prepare_strength_map(strength_map)
    weights = _usan_weights(edg, radius)

    mo = _moments(weights, geom)
    edge = edg > 0.0
    if connected:
        _connected_moments(weights, geom, edge, mo)
    del weights

    theta = np.zeros(edg.shape, dtype=np.float64)
    # a zero-weight window leaves the sentinel in place
    valid = edge & (mo["area"] > 0.0)
    if np.any(valid):
        theta[valid] = normalize_angles(
            _tangent_angles({name: arr[valid] for name, arr in mo.items()})
        )
    return theta
