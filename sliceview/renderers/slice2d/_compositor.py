"""
Drawing of the image and label buffers, and the overlays, onto the
visible canvas.
"""

import math

import numpy as np

from ._mapping import rotation_matrix
from ...utils.enums import Orientation


MIN_SCALE = 1e-4

POINTER_COLOR = "rgba(33,150,243,1)"
POINTER_SIZE = 10
POINTER_LINE_WIDTH = 2


def normalized_scale(view):
    """Get the zoom factor from a camera view, floored at a small positive value."""
    return max(float(view[14]), MIN_SCALE)


def total_quarter_turns(orientation, quarter_turns):
    """The rotation of the drawn image, including the quarter turn of sagittal slices."""
    orientation = Orientation.from_name(orientation)
    return int(quarter_turns) + (1 if orientation == Orientation.X else 0)


def render_buffers(
    context,
    buffers,
    slice,
    orientation,
    view,
    *,
    quarter_turns=0,
    flip_rows=1,
    flip_columns=1,
    labelmap=None,
):
    """Draw the image and label buffers of a slice onto a context.

    The transform is built up in this order: scale by the zoom, move to
    the center of the viewport, rotate, flip, and apply the pan. The
    pan is rotated and flipped back, so that it stays aligned with the
    screen. The image is drawn centered at the origin, at its physical
    size. The label buffer is drawn on top, with the labelmap opacity,
    if the labelmap is visible.
    """
    canvas = context.canvas
    width, height = canvas.width, canvas.height
    scale = normalized_scale(view)

    context.save()
    context.set_transform()
    context.global_alpha = 1.0
    context.clear()

    context.scale(scale, scale)
    context.translate(width / 2 / scale, height / 2 / scale)

    turns = total_quarter_turns(orientation, quarter_turns)
    context.rotate(turns * math.pi / 2)

    if turns % 2:
        context.scale(flip_rows, flip_columns)
    else:
        context.scale(flip_columns, flip_rows)

    m = rotation_matrix(orientation, quarter_turns, flip_rows, flip_columns)
    tx, ty = m.T @ np.array([float(view[12]), -float(view[13])])
    context.translate(tx, ty)

    pw = slice.width * slice.width_spacing
    ph = slice.height * slice.height_spacing
    context.draw_image(buffers.image, -pw / 2, -ph / 2, pw, ph)

    if labelmap is not None and labelmap.visible:
        context.global_alpha = labelmap.opacity
        context.draw_image(buffers.label, -pw / 2, -ph / 2, pw, ph)

    context.restore()


def draw_pointer(context, x, y):
    """Draw the pointer caret, with its tip at the given screen position."""
    context.save()
    context.set_transform()
    context.global_alpha = 1.0
    points = [
        (x - POINTER_SIZE, y + POINTER_SIZE),
        (x, y + 1),
        (x + POINTER_SIZE, y + POINTER_SIZE),
    ]
    context.stroke_polyline(points, POINTER_COLOR, POINTER_LINE_WIDTH)
    context.restore()
