"""
io_utils/io.py
==============

Light‑weight image I/O helpers for the SUSAN edge detector.

Responsibilities
----------------
* Load an image as **float64** RGB (colour kept, grayscale reduction is
  done by ``preprocess.to_gray``) or directly as grayscale.
* Save a map (strength, orientation view, overlay) making sure the parent
  directory exists.  Integer strength maps are written untouched, so a
  uint16 map from ``norm_range > 255`` survives as a 16‑bit PNG.
* One‑liner helper to drop intermediates into the run's ``debug_img``
  folder using `path.debug_img_path()`.

No heavy lifting (CLI parsing, timing) lives here; those belong to
upper‑level modules.
"""
from __future__ import annotations

import os
from typing import Union

import cv2
import numpy as np

from .path import ensure_dir, debug_img_path

# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------
__all__ = [
    "load_image",
    "load_gray",
    "save_image",
    "save_debug",
]

PathLike = Union[str, os.PathLike]


# ---------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------
def _read(src: PathLike, flags: int) -> np.ndarray:
    img = cv2.imread(str(src), flags)
    if img is None:
        raise FileNotFoundError(f"Cannot read image: {src}")
    return img


def load_image(src: PathLike) -> np.ndarray:
    """
    Read *src* keeping its colour.

    Returns
    -------
    img : np.ndarray, float64
        H×W for grayscale files, H×W×3 **RGB** otherwise (alpha dropped).
        Samples keep their file scale ([0,255] for 8‑bit files).
    """
    img = _read(src, cv2.IMREAD_UNCHANGED)
    if img.ndim == 3:
        code = cv2.COLOR_BGRA2RGB if img.shape[2] == 4 else cv2.COLOR_BGR2RGB
        img = cv2.cvtColor(img, code)
    return img.astype(np.float64)


def load_gray(src: PathLike, normalise: bool = False) -> np.ndarray:
    """
    Read *src* as **grayscale** float64 array.

    Parameters
    ----------
    src : str | os.PathLike
        Image path.
    normalise : bool, default=False
        If True, divide by 255 so the output is in [0, 1].
    """
    img = _read(src, cv2.IMREAD_GRAYSCALE).astype(np.float64)
    if normalise:
        img /= 255.0
    return img


# ---------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------
def _to_writable(img: np.ndarray) -> np.ndarray:
    """
    Convert *img* to a dtype PNG can store.

    * uint8 / uint16 are returned as‑is (copy).
    * bool → 0/255.
    * Anything else → assume range [0,1] (floats with max ≤ 1) or
      [0,255]; clip and scale to uint8.
    """
    if img.dtype in (np.uint8, np.uint16):
        return img.copy()
    if img.dtype == bool:
        return img.astype(np.uint8) * 255
    if img.dtype.kind == "f" and img.size and img.max() <= 1.0:
        img = img * 255.0
    return np.clip(np.rint(img), 0, 255).astype(np.uint8)


def save_image(dst: PathLike, img: np.ndarray, *, auto_mkdir: bool = True) -> None:
    """
    Save *img* to *dst* (PNG/JPEG). Creates parent directories if needed.

    3‑channel images are expected in **BGR** order (OpenCV convention).

    Raises
    ------
    IOError
        If OpenCV refuses to write the file.
    """
    if auto_mkdir:
        ensure_dir(os.path.dirname(str(dst)))
    if not cv2.imwrite(str(dst), _to_writable(img)):
        raise IOError(f"Cannot write image: {dst}")


def save_debug(img: np.ndarray, filename: str | None = None) -> str:
    """
    Convenience wrapper: dump *img* into the run's ``debug_img`` folder.

    Returns the absolute path where the file was written.
    """
    path = debug_img_path(filename)
    save_image(path, img, auto_mkdir=False)  # dir already ensured
    return path
