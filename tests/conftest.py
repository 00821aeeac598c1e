import numpy as np
import pytest


@pytest.fixture
def vertical_step():
    """20×20 image, columns 0‑9 at 50, columns 10‑19 at 200."""
    img = np.full((20, 20), 50.0)
    img[:, 10:] = 200.0
    return img


@pytest.fixture
def diagonal_step():
    """30×30 image split along the main diagonal (200 above it, 50 on and below)."""
    i, j = np.indices((30, 30))
    return np.where(j > i, 200.0, 50.0)


@pytest.fixture
def two_islands():
    """
    7×7 window around pixel (3, 3): a 3×3 similar block touching the
    nucleus and a similar 3‑pixel strip on row 0 cut off by row 1.
    """
    img = np.full((7, 7), 200.0)
    img[2:5, 2:5] = 100.0
    img[0, 2:5] = 100.0
    return img


@pytest.fixture
def noisy_image():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(24, 32)).astype(np.uint8)
