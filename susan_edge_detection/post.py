"""
post.py
=======

Visualisation helpers for SUSAN edge maps.

Typical workflow
----------------
```
edg   = strength.edge_strength(img)
theta = orientation.edge_orientation(edg)
view  = strength_to_uint8(edg)                 # grayscale edge view
thin  = thin_edges(edg)                        # 1‑pixel centre‑line
vis   = overlay(img, thin, color=(0, 0, 255))  # edges on the source
hsv   = orientation_to_color(theta, edg)       # hue = angle
```

Functions
---------
* **strength_to_uint8(strength)** – display scaling to [0,255].
* **thin_edges(strength)** – skeleton of the edge support.
* **orientation_to_color(theta, strength)** – BGR rendering of angles.
* **overlay(img, mask, color, alpha)** – RGBA compositing.

*img* arguments accept grayscale or RGB, *float* or *uint8*; colours are
BGR tuples, ready for ``io_utils.io.save_image``.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import cv2
from skimage.morphology import skeletonize

__all__ = [
    "strength_to_uint8",
    "thin_edges",
    "orientation_to_color",
    "overlay",
]


# ---------------------------------------------------------------------
# Strength
# ---------------------------------------------------------------------
def strength_to_uint8(strength: np.ndarray) -> np.ndarray:
    """
    Scale *strength* so its maximum maps to 255.

    Works for raw float maps and for normalised integer maps of any width.
    An all‑zero map stays zero.
    """
    s = strength.astype(np.float64)
    peak = s.max() if s.size else 0.0
    if peak <= 0:
        return np.zeros(s.shape, dtype=np.uint8)
    return np.rint(s * (255.0 / peak)).astype(np.uint8)


def thin_edges(strength: np.ndarray) -> np.ndarray:
    """
    Reduce the edge support (strength > 0) to a 1‑pixel‑wide skeleton.
    Uses `skimage.morphology.skeletonize`.

    Returns
    -------
    np.ndarray[bool] – skeleton mask.
    """
    return skeletonize(np.asarray(strength) > 0)


# ---------------------------------------------------------------------
# Orientation
# ---------------------------------------------------------------------
def orientation_to_color(
    theta: np.ndarray,
    strength: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Render an orientation map as a BGR uint8 image.

    Hue encodes the angle ((0, π] → full hue circle, so θ and θ+π look
    the same), value encodes *strength* (or edge presence when *strength*
    is None).  Undefined pixels (θ = 0) are black.
    """
    defined = theta > 0
    hue = np.zeros(theta.shape, dtype=np.uint8)
    # OpenCV 8-bit hue spans [0,180)
    hue[defined] = (np.rint(theta[defined] / np.pi * 180.0) % 180).astype(np.uint8)

    if strength is None:
        val = defined.astype(np.uint8) * 255
    else:
        val = strength_to_uint8(strength)
        val[~defined] = 0

    sat = np.full(theta.shape, 255, dtype=np.uint8)
    hsv = np.dstack([hue, sat, val])
    return cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)


# ---------------------------------------------------------------------
# Compositing
# ---------------------------------------------------------------------
def _prepare_float(img: np.ndarray) -> np.ndarray:
    """Return float32 3‑channel image in [0,1]."""
    if img.ndim == 2:
        img = np.stack([img] * 3, axis=-1)
    img = img.astype(np.float32)
    if img.size and img.max() > 1.0:
        img /= 255.0
    return np.clip(img, 0.0, 1.0)


def overlay(
    img: np.ndarray,
    mask: np.ndarray,
    *,
    color: tuple[int, int, int] = (0, 0, 255),
    alpha: float = 0.6,
) -> np.ndarray:
    """
    Alpha‑blend *mask* on top of *img*.

    Parameters
    ----------
    img : np.ndarray
        Grayscale or 3‑channel image, [0,255] or [0,1].
    mask : np.ndarray[bool] | numeric
        Edge mask; any non‑zero value counts.
    color : 3‑tuple, default=(0,0,255)
        Overlay colour (BGR).
    alpha : float, default=0.6
        Opacity of the mask colour.

    Returns
    -------
    out : np.ndarray[uint8], H×W×3.
    """
    if img.shape[:2] != mask.shape[:2]:
        raise ValueError(f"Mask shape {mask.shape} does not match image {img.shape}")
    base = _prepare_float(img)
    mask_bool = mask.astype(bool)

    colour = np.array(color, dtype=np.float32) / 255.0
    out = base.copy()
    out[mask_bool] = alpha * colour + (1.0 - alpha) * base[mask_bool]
    return (out * 255.0).round().astype(np.uint8)
