"""
The buffer engine turns the stored intensities and labels of a slice
into two RGBA images, according to the display state of the volume
(window, thresholds, colors, label filter). It caches the state that
it used, and only recomputes when that state changes.
"""

import numpy as np

from ...canvases import Canvas
from ...objects import SHOW_ALL
from ...utils import logger


class SliceBuffers:
    """The off-screen image and label buffers of a slice renderer.

    The ``image`` and ``label`` canvases always have the size of the
    slice that was last computed. The cache fields hold the values that
    were used for that computation.
    """

    def __init__(self):
        self.image = Canvas(1, 1)
        self.label = Canvas(1, 1)
        self.update_count = 0
        self.invalidate()

    def invalidate(self):
        """Reset the cache, so that the next ``refresh()`` recomputes."""
        self.current_slice = -1
        self.lower_threshold = -1
        self.upper_threshold = -1
        self.window_low = -1
        self.window_high = -1
        self.show_only_color = SHOW_ALL

    def needs_update(self, volume, slice_index):
        """Get whether the buffers are out of date for the given volume state."""
        if (
            self.current_slice != slice_index
            or self.lower_threshold != volume.lower_threshold
            or self.upper_threshold != volume.upper_threshold
            or self.window_low != volume.window_low
            or self.window_high != volume.window_high
        ):
            return True
        # The label filter only matters when there is a labelmap
        labelmap = volume.labelmap
        if labelmap is not None:
            return tuple(labelmap.show_only_color) != tuple(self.show_only_color)
        return False

    def refresh(self, volume, stack, slice_index):
        """Recompute the buffers if needed. Returns whether they were recomputed."""
        if not self.needs_update(volume, slice_index):
            return False
        return self.update(volume, stack, slice_index)

    def update(self, volume, stack, slice_index):
        """Recompute the buffers for a slice of the given stack.

        Returns False (and leaves the buffers untouched) if the slice
        does not exist.
        """
        current = stack.get(slice_index)
        if current is None:
            logger.debug(f"No slice {slice_index} in a stack of {len(stack)}, skipping.")
            return False

        width, height = current.width, current.height
        self.image.resize(width, height)
        self.label.resize(width, height)

        lower, upper = volume.lower_threshold, volume.upper_threshold
        low, high = volume.window_low, volume.window_high

        intensity = denormalize(current.data, volume.min, volume.max)
        display = apply_window(intensity, low, high)
        visible = (intensity >= lower) & (intensity <= upper)

        pixels = np.zeros((intensity.size, 4), np.uint8)
        pixels[visible, :3] = color_ramp(
            display[visible], volume.min_color, volume.max_color
        )
        pixels[visible, 3] = 255

        labels = np.zeros((intensity.size, 4), np.uint8)
        labelmap = volume.labelmap
        if labelmap is not None:
            show_only_color = tuple(labelmap.show_only_color)
        if labelmap is not None and current.labelmap is not None:
            label_data = current.labelmap.reshape(-1, 4)
            mask = visible
            if show_only_color[3] != -255:
                mask = mask & np.all(label_data == np.array(show_only_color), axis=1)
            labels[mask] = label_data[mask]

        self.image.put_image_data(pixels)
        self.label.put_image_data(labels)

        self.current_slice = slice_index
        self.lower_threshold = lower
        self.upper_threshold = upper
        self.window_low = low
        self.window_high = high
        if labelmap is not None:
            self.show_only_color = show_only_color

        self.update_count += 1
        logger.debug(f"Recomputed {width}x{height} buffers for slice {slice_index}")
        return True


def denormalize(data, vmin, vmax):
    """Map stored bytes (0-255) back to scalar values in [vmin, vmax]."""
    return np.asarray(data, np.float64) * ((vmax - vmin) / 255.0) + vmin


def apply_window(intensity, low, high):
    """Map intensities to display values (0-255), linear within [low, high].

    With an empty window, values up to the level are 0 and above it 255.
    """
    window = high - low
    level = window / 2 + low
    if window > 0:
        display = 255 * (intensity - (level - window / 2)) / window
        return np.clip(display, 0, 255)
    return np.where(intensity > level, 255.0, 0.0)


def color_ramp(display, min_color, max_color):
    """Blend between two RGB colors (0-1) by display values (0-255).

    Returns an (N, 3) uint8 array.
    """
    display = np.asarray(display, np.float64)[:, None]
    rgb = np.array(max_color, np.float64) * display
    rgb += np.array(min_color, np.float64) * (255 - display)
    return np.floor(rgb).clip(0, 255).astype(np.uint8)
