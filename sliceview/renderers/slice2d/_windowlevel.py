"""
The relative window/level control law, as driven by drag gestures.
"""

import math

from ...utils import logger


# Each unit of delta changes the window (or level) by this fraction of its current value
STEP_FRACTION = 1 / 15


def _trunc(value):
    return int(math.trunc(value))


def adjust_window_level(volume, window_delta, level_delta):
    """Adjust the display window of a volume, relative to its current state.

    A positive ``window_delta`` widens the window, a positive
    ``level_delta`` moves it up. The new window and level are truncated
    to integers. A non-zero delta that is too small to change the
    truncated value still moves it by one unit, so that every gesture has
    a visible effect. Zero deltas leave the window as it is.

    The result is clamped so that ``min <= window_low <= window_high <= max``.
    Returns the new (window_low, window_high).
    """
    low, high = volume.window_low, volume.window_high

    if window_delta or level_delta:
        old_window = high - low
        old_level = old_window / 2

        new_window = old_window
        if window_delta:
            new_window = _trunc(old_window + old_window * STEP_FRACTION * -window_delta)
            if new_window == old_window:
                new_window += 1
        new_level = old_level
        if level_delta:
            new_level = _trunc(old_level + old_level * STEP_FRACTION * level_delta)
            if new_level == old_level:
                new_level += 1

        level_shift = _trunc(old_level - new_level)
        window_shift = _trunc(old_window - new_window)
        low = max(low - level_shift - window_shift, volume.min)
        high = min(high - level_shift + window_shift, volume.max)

    # Never let the window turn inside out
    low = min(max(low, volume.min), volume.max)
    high = min(max(high, volume.min), volume.max)
    if low > high:
        low = high = (low + high) / 2

    volume.window_low, volume.window_high = low, high
    logger.debug(f"Window/level adjusted to [{low:g}, {high:g}]")
    return low, high
