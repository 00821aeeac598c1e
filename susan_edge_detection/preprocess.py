"""
preprocess.py
=============

Input conditioning shared by the edge‑strength and edge‑orientation
passes.

Functions
---------
* **check_image**    – rank / dtype / finiteness validation.
* **to_gray**        – reduce an RGB image to one channel (BT.601 luma).
* **as_brightness**  – validated float64 single channel plus the +255 offset.
* **pad_replicate**  – edge‑replicated border of *radius* pixels.
* **pad_constant**   – constant border of *radius* pixels.

Every check here runs before any map is allocated, so a bad argument never
produces partial output.  Padding uses ``cv2.copyMakeBorder``; grayscale
conversion is a float64 weighted sum with the ``cv2.COLOR_RGB2GRAY`` weights.
"""
from __future__ import annotations

import cv2
import numpy as np

__all__ = [
    "BRIGHTNESS_OFFSET",
    "check_image",
    "to_gray",
    "as_brightness",
    "pad_replicate",
    "pad_constant",
]

# Keeps every comparison away from representational issues around zero.
BRIGHTNESS_OFFSET = 255.0

# ITU‑R BT.601 luma weights, as cv2.COLOR_RGB2GRAY
_LUMA_RGB = np.array([0.299, 0.587, 0.114])


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------
def check_image(img: np.ndarray) -> None:
    """
    Raise if *img* is not a finite 2‑D or H×W×3 numeric array.

    Raises
    ------
    TypeError
        Non‑numeric dtype (object, complex, strings, …).
    ValueError
        Wrong rank / channel count, empty image, NaN or Inf samples.
    """
    if not isinstance(img, np.ndarray):
        raise TypeError(f"Expected a numpy array, got {type(img).__name__}")
    if img.dtype.kind not in "biuf":
        raise TypeError(f"Unsupported image dtype: {img.dtype}")
    if img.ndim == 3:
        if img.shape[2] != 3:
            raise ValueError(
                f"Unrecognized image type with {img.shape[2]} channels, "
                "please use RGB or greyscale images"
            )
    elif img.ndim != 2:
        raise ValueError(
            f"Unrecognized image type with shape {img.shape}, "
            "please use RGB or greyscale images"
        )
    if img.shape[0] == 0 or img.shape[1] == 0:
        raise ValueError(f"Empty image: shape {img.shape}")
    if img.dtype.kind == "f" and not np.all(np.isfinite(img)):
        raise ValueError("Image contains NaN or Inf samples")


# ----------------------------------------------------------------------
# Grayscale
# ----------------------------------------------------------------------
def to_gray(img: np.ndarray) -> np.ndarray:
    """
    Return *img* as a single‑channel float64 array.

    2‑D arrays are only cast.  H×W×3 arrays are treated as **RGB** and
    reduced with 0.299·R + 0.587·G + 0.114·B in float64, so wide‑range
    samples (uint32, large floats) keep their precision.  Samples keep
    their scale (uint8 input stays in [0,255]).
    """
    check_image(img)
    if img.ndim == 2:
        return img.astype(np.float64)
    return img.astype(np.float64) @ _LUMA_RGB


def as_brightness(img: np.ndarray) -> np.ndarray:
    """Grayscale float64 copy of *img* shifted by :data:`BRIGHTNESS_OFFSET`."""
    return to_gray(img) + BRIGHTNESS_OFFSET


# ----------------------------------------------------------------------
# Padding
# ----------------------------------------------------------------------
def pad_replicate(img: np.ndarray, radius: int) -> np.ndarray:
    """Add *radius* replicated rows/columns on every side of *img*."""
    return cv2.copyMakeBorder(
        img, radius, radius, radius, radius, borderType=cv2.BORDER_REPLICATE
    )


def pad_constant(img: np.ndarray, radius: int, value: float = 0.0) -> np.ndarray:
    """Add *radius* rows/columns filled with *value* on every side of *img*."""
    return cv2.copyMakeBorder(
        img, radius, radius, radius, radius,
        borderType=cv2.BORDER_CONSTANT, value=value,
    )
