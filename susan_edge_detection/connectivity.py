"""
connectivity.py
===============

Restrict a USAN window to the island that touches the nucleus.

The plain SUSAN area counts every similar pixel inside the kernel, even
when a ridge of dissimilar pixels separates it from the nucleus.  With the
optional refinement only the cells 8‑connected (diagonals included) to the
nucleus are kept.  The flood fill is `skimage.segmentation.flood`, applied
to one (2·KR+1)² window at a time, so each call costs O(KW²).

Public API
----------
* `select_connected(binary, seed=None) -> np.ndarray[bool]`
* `needs_connectivity(nonzero, area, radius) -> bool`
* `restrict_to_nucleus(weights, area, radius) -> np.ndarray`
"""
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from skimage.segmentation import flood

__all__ = [
    "select_connected",
    "needs_connectivity",
    "restrict_to_nucleus",
]


def select_connected(
    binary: np.ndarray,
    seed: Optional[Tuple[int, int]] = None,
) -> np.ndarray:
    """
    Keep the True cells of *binary* that are 8‑connected to *seed*.

    Parameters
    ----------
    binary : np.ndarray
        2‑D window; any non‑zero value counts as True.
    seed : (row, col), optional
        Start of the flood fill.  Defaults to the window centre.

    Returns
    -------
    np.ndarray[bool] – same shape as *binary*, False outside the island.
    An all‑False array is returned when the seed itself is False.
    """
    if binary.ndim != 2:
        raise ValueError(f"Expected a 2-D window, got shape {binary.shape}")
    cells = binary.astype(bool)
    if seed is None:
        seed = (cells.shape[0] // 2, cells.shape[1] // 2)
    if not cells[seed]:
        return np.zeros_like(cells)
    return flood(cells.view(np.uint8), seed, connectivity=2)


def needs_connectivity(nonzero, area: int, radius: int):
    """
    Cheap pre‑check: a window with at least KArea − KR non‑zero cells is
    treated as a single island and the flood fill is skipped.

    *nonzero* may be a single count or an array of counts.
    """
    return nonzero < area - radius


def restrict_to_nucleus(weights: np.ndarray, area: int, radius: int) -> np.ndarray:
    """
    Zero the weights outside the nucleus island, in place.

    *weights* is a masked (2·KR+1)² weight window.  The window is returned
    unchanged when the pre‑check says it is already connected.
    """
    binary = weights != 0
    if needs_connectivity(int(np.count_nonzero(binary)), area, radius):
        weights[~select_connected(binary)] = 0.0
    return weights
