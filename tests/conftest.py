import numpy as np
import pytest

from hdrscope.raster import Raster


@pytest.fixture
def rng():
  return np.random.default_rng(20250428)


@pytest.fixture
def four_gray_raster():
  """2x2 raster with black, white, mid gray and dark gray pixels."""
  data = bytes([
    0, 0, 0, 255,
    255, 255, 255, 255,
    128, 128, 128, 255,
    64, 64, 64, 255,
  ])
  return Raster.from_rgba_bytes(2, 2, data)


@pytest.fixture
def uniform_raster():
  pixels = np.empty((3, 5, 3), dtype=np.uint8)
  pixels[:, :] = (200, 100, 30)
  return Raster.from_array(pixels)
