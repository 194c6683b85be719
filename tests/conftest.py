from __future__ import annotations

from typing import Callable

import numpy as np
import pytest


def _gradient(width: int, height: int) -> np.ndarray:
    """RGBA image whose pixels encode their own coordinates."""
    ys, xs = np.mgrid[0:height, 0:width]
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:, :, 0] = xs % 256
    image[:, :, 1] = ys % 256
    image[:, :, 2] = (xs + ys) % 256
    image[:, :, 3] = 255
    return image


@pytest.fixture
def make_image() -> Callable[[int, int], np.ndarray]:
    return _gradient


@pytest.fixture
def image_100() -> np.ndarray:
    return _gradient(100, 100)
