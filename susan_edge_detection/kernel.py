"""
kernel.py
=========

Circular USAN kernel shared by the edge‑strength and edge‑orientation
passes.

A cell at offset (i, j), i, j ∈ [-KR, KR], belongs to the kernel iff

    round(sqrt(i² + j²)) ≤ KR

For KR = 3 this yields the classic 37‑pixel SUSAN mask:

    . . x x x . .
    . x x x x x .
    x x x x x x x
    x x x o x x x
    x x x x x x x
    . x x x x x .
    . . x x x . .

Everything here depends on the radius only, so the geometry is built once
per radius and cached.  Returned arrays are **read‑only**.

Public API
----------
* `circular_mask(radius) -> (mask, area)`
* `kernel_geometry(radius) -> KernelGeometry`
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from numbers import Integral
from typing import Tuple

import numpy as np

__all__ = [
    "KernelGeometry",
    "check_radius",
    "circular_mask",
    "kernel_geometry",
]


# ---------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------
def check_radius(radius) -> int:
    """Return *radius* as int, raising ``ValueError`` unless it is an integer ≥ 1."""
    if isinstance(radius, bool) or not isinstance(radius, Integral):
        raise ValueError(f"Kernel radius must be an integer, got {radius!r}")
    if radius < 1:
        raise ValueError(f"Kernel radius must be ≥ 1, got {radius}")
    return int(radius)


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


# ---------------------------------------------------------------------
# Mask
# ---------------------------------------------------------------------
def circular_mask(radius: int) -> Tuple[np.ndarray, int]:
    """
    Build the circular kernel mask.

    Parameters
    ----------
    radius : int
        Kernel radius KR (nucleus excluded), must be ≥ 1.

    Returns
    -------
    mask : np.ndarray[bool], shape (2·KR+1, 2·KR+1)
    area : int
        Number of True cells (KArea).
    """
    geom = kernel_geometry(radius)
    return geom.mask, geom.area


# ---------------------------------------------------------------------
# Geometry container
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class KernelGeometry:
    """Mask plus the coordinate tables needed by the orientation pass.

    ``rx``/``ry`` hold the column/row offset of every cell, ``dsqx``,
    ``dsqy`` and ``rxy`` their squares and product.  All five tables are
    already multiplied by the mask, so a plain element‑wise product with a
    window gives the masked moment terms.
    """
    radius: int
    mask: np.ndarray
    area: int
    rx: np.ndarray
    ry: np.ndarray
    dsqx: np.ndarray
    dsqy: np.ndarray
    rxy: np.ndarray

    @property
    def width(self) -> int:
        """Kernel width KW = 2·KR + 1."""
        return 2 * self.radius + 1

    @property
    def geometric_threshold(self) -> float:
        """USAN area below which a pixel counts as an edge (3·KArea/4)."""
        return 3.0 * self.area / 4.0

    @property
    def offsets(self) -> Tuple[Tuple[int, int], ...]:
        """(row, col) offsets of the mask cells, row‑major."""
        rows, cols = np.nonzero(self.mask)
        return tuple(
            (int(r) - self.radius, int(c) - self.radius) for r, c in zip(rows, cols)
        )


@lru_cache(maxsize=None, typed=True)
def kernel_geometry(radius: int) -> KernelGeometry:
    """
    Return the cached :class:`KernelGeometry` for *radius*.

    Raises
    ------
    ValueError
        If *radius* is not an integer ≥ 1.
    """
    radius = check_radius(radius)

    d = np.arange(-radius, radius + 1, dtype=np.float64)
    rx = np.tile(d, (d.size, 1))  # column offset, varies along axis 1
    ry = rx.T.copy()              # row offset, varies along axis 0

    mask = np.rint(np.hypot(rx, ry)) <= radius
    weight = mask.astype(np.float64)

    return KernelGeometry(
        radius=radius,
        mask=_frozen(mask),
        area=int(np.count_nonzero(mask)),
        rx=_frozen(rx * weight),
        ry=_frozen(ry * weight),
        dsqx=_frozen(rx ** 2 * weight),
        dsqy=_frozen(ry ** 2 * weight),
        rxy=_frozen(rx * ry * weight),
    )
