"""
Utilities to write rendered slices to image files, using imageio.
"""

import os
from importlib.util import find_spec

import numpy as np

from . import logger


def save_image(source, filename):
    """Write a rendered frame to an image file.

    This function requires the imageio library.

    Parameters
    ----------
    source : SliceRenderer | Canvas | ndarray
        Anything that has a ``snapshot()`` method returning an RGBA
        array, or an (H, W, 4) uint8 array.
    filename : str
        The location to write to. The format is derived from the extension.

    """
    if not find_spec("imageio"):
        raise ImportError(
            "The `imageio` library is required to save images: pip install imageio"
        )
    import imageio.v3 as iio

    if hasattr(source, "snapshot"):
        im = source.snapshot()
    else:
        im = np.asarray(source)
    if im.ndim != 3 or im.shape[2] != 4 or im.dtype != np.uint8:
        raise ValueError(f"Expected an (H, W, 4) uint8 image, got {im.shape} {im.dtype}")

    if filename.startswith("~"):
        filename = os.path.expanduser(filename)
    iio.imwrite(filename, im)
    logger.info(f"Wrote {im.shape[1]}x{im.shape[0]} image to {filename}")
