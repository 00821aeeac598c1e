"""
angles.py
=========

Fold edge angles into the canonical half‑open interval (0, π].

Angles are tangents to the edge, counted counter‑clockwise from the
horizontal, so θ and θ+π describe the same edge.  The fold applies **one**
conditional shift in each direction:

    θ ≤ 0  →  θ + π
    θ > π  →  θ − π

This is only a full reduction for inputs in (−π, 2π], which covers every
value the orientation pass can produce (atan outputs plus at most π/2).
It is intentionally not a modulo.

Public API
----------
* `normalize_angle(angle) -> float`
* `normalize_angles(angles) -> np.ndarray`
"""
from __future__ import annotations

import math

import numpy as np

__all__ = [
    "normalize_angle",
    "normalize_angles",
]


def normalize_angle(angle: float) -> float:
    """Return *angle* folded into (0, π]; valid for inputs in (−π, 2π]."""
    angle = float(angle)
    if angle <= 0.0:
        angle = math.pi + angle
    if angle > math.pi:
        angle = angle - math.pi
    return angle


def normalize_angles(angles: np.ndarray) -> np.ndarray:
    """Element‑wise :func:`normalize_angle` on a float array (returns a new array)."""
    out = np.array(angles, dtype=np.float64, copy=True)
    out[out <= 0.0] += np.pi
    out[out > np.pi] -= np.pi
    return out
