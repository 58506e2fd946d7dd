"""
Mapping between screen coordinates, slice pixels, voxel indices and world
(RAS) coordinates.

Screen coordinates are canvas pixels, with the origin at the top-left
and y pointing down. A slice is drawn centered in the viewport, scaled
by the normalized scale, and offset by the camera pan. The sagittal (X)
slices are stored transposed, and drawn with an extra quarter turn, so
their displayed width and height are swapped.

The functions in this module are pure; the renderer passes in its state.
"""

import math
from typing import NamedTuple

import numpy as np
import pylinalg as la

from ...utils import round_half_up
from ...utils.enums import Orientation


ORIENTATION_COLORS = {
    Orientation.X: ("rgba(0,255,0,.3)", "rgba(0,0,255,.3)"),
    Orientation.Y: ("rgba(255,0,0,.3)", "rgba(0,0,255,.3)"),
    Orientation.Z: ("rgba(255,0,0,.3)", "rgba(0,255,0,.3)"),
}

# cos and sin of the quarter turns, exact
_QUARTER_TURNS = ((1, 0), (0, 1), (-1, 0), (0, -1))


class PickResult(NamedTuple):
    """The result of picking a screen point on a slice."""

    #: The slice index along each of the X, Y and Z stacks.
    axis_indices: tuple
    #: The voxel index (i, j, k) of the picked pixel.
    slice_indices: tuple
    #: The world (RAS) coordinate of the picked point.
    world: tuple


class SliceGeometry(NamedTuple):
    """The size of a slice as it is displayed (i.e. swapped for sagittal)."""

    orientation: Orientation
    width: int
    height: int
    width_spacing: float
    height_spacing: float
    colors: tuple

    @classmethod
    def from_slice(cls, slice, orientation):
        orientation = Orientation.from_name(orientation)
        if orientation == Orientation.X:
            return cls(
                orientation,
                slice.height,
                slice.width,
                slice.height_spacing,
                slice.width_spacing,
                ORIENTATION_COLORS[orientation],
            )
        return cls(
            orientation,
            slice.width,
            slice.height,
            slice.width_spacing,
            slice.height_spacing,
            ORIENTATION_COLORS[orientation],
        )

    @property
    def physical_size(self):
        """The displayed (width, height) in world units."""
        return self.width * self.width_spacing, self.height * self.height_spacing

    def screen_rect(self, viewport_size, scale, pan):
        """Get the (left, top, width, height) that the slice occupies on screen.

        The ``pan`` is the camera (x, y) offset in world units, with y up.
        """
        vw, vh = viewport_size
        pw, ph = self.physical_size
        width, height = pw * scale, ph * scale
        left = vw / 2 - width / 2 + pan[0] * scale
        top = vh / 2 - height / 2 - pan[1] * scale
        return left, top, width, height


def rotation_matrix(orientation, quarter_turns=0, flip_rows=1, flip_columns=1):
    """Get the 2x2 matrix that the compositor applies to the image.

    It combines the user rotation (in quarter turns), the intrinsic
    quarter turn of sagittal slices, and the flips. Under an odd number
    of quarter turns, the flip signs swap axes, so that flipping columns
    always mirrors horizontally on screen.
    """
    orientation = Orientation.from_name(orientation)
    total = int(quarter_turns) + (1 if orientation == Orientation.X else 0)
    c, s = _QUARTER_TURNS[total % 4]
    if total % 2:
        fx, fy = flip_rows, flip_columns
    else:
        fx, fy = flip_columns, flip_rows
    rot = np.array([[c, -s], [s, c]], np.float64)
    return rot @ np.diag([float(fx), float(fy)])


def _view_center(viewport_size, scale, pan):
    return np.array(
        [viewport_size[0] / 2 + pan[0] * scale, viewport_size[1] / 2 - pan[1] * scale]
    )


def canonicalize_point(
    x, y, orientation, viewport_size, scale, pan, quarter_turns=0, flip_rows=1, flip_columns=1
):
    """Undo the user rotation and flips of a screen point, about the image center.

    With no rotation and no flips, the point is returned unchanged.
    """
    center = _view_center(viewport_size, scale, pan)
    m = rotation_matrix(orientation, quarter_turns, flip_rows, flip_columns)
    m0 = rotation_matrix(orientation)
    d = m0 @ m.T @ (np.array([x, y], np.float64) - center)
    return float(center[0] + d[0]), float(center[1] + d[1])


def decanonicalize_point(
    x, y, orientation, viewport_size, scale, pan, quarter_turns=0, flip_rows=1, flip_columns=1
):
    """Apply the user rotation and flips to a point; the inverse of ``canonicalize_point()``."""
    center = _view_center(viewport_size, scale, pan)
    m = rotation_matrix(orientation, quarter_turns, flip_rows, flip_columns)
    m0 = rotation_matrix(orientation)
    d = m @ m0.T @ (np.array([x, y], np.float64) - center)
    return float(center[0] + d[0]), float(center[1] + d[1])


def pick_pixel(geometry, x, y, viewport_size, scale, pan):
    """Map a (canonical) screen point to pixel coordinates of the stored slice.

    Returns a (px, py) tuple of continuous coordinates, or None if the
    point is outside the slice. Points on the border are inside.
    """
    left, top, width, height = geometry.screen_rect(viewport_size, scale, pan)
    if not (left <= x <= left + width and top <= y <= top + height):
        return None
    if width <= 0 or height <= 0:
        return None

    xs = (x - left) / width * geometry.width
    ys = (y - top) / height * geometry.height

    if geometry.orientation == Orientation.X:
        # Invert columns, then swap to undo the quarter turn
        return ys, geometry.width - xs
    elif geometry.orientation == Orientation.Y:
        return geometry.width - xs, ys
    else:
        return geometry.width - xs, geometry.height - ys


def pixel_to_screen(geometry, px, py, viewport_size, scale, pan):
    """Map pixel coordinates of the stored slice to a (canonical) screen point.

    This is the inverse of ``pick_pixel()``.
    """
    if geometry.orientation == Orientation.X:
        xs, ys = geometry.width - py, px
    elif geometry.orientation == Orientation.Y:
        xs, ys = geometry.width - px, py
    else:
        xs, ys = geometry.width - px, geometry.height - py
    left, top, width, height = geometry.screen_rect(viewport_size, scale, pan)
    return left + xs / geometry.width * width, top + ys / geometry.height * height


def pixel_to_xy(slice, px, py):
    """Map pixel coordinates of a slice to its XY frame (x, y, z)."""
    return (
        slice.wmin + px * slice.width_spacing,
        slice.hmin + py * slice.height_spacing,
        slice.xy_bbox[4],
    )


def xy_to_world(slice, px, py):
    """Map pixel coordinates of a slice to world (RAS) coordinates."""
    xyz = np.array(pixel_to_xy(slice, px, py), np.float64)
    return tuple(float(v) for v in la.vec_transform(xyz, slice.xy_to_ras))


def xy_to_index(slice, px, py, children_info=None):
    """Map pixel coordinates of a slice to the (i, j, k) of the voxel it covers.

    If ``children_info`` is given, each index is clamped to the voxel
    count along its axis.
    """
    xyz = np.array(pixel_to_xy(slice, px, py), np.float64)
    ijk = [int(math.floor(v)) for v in la.vec_transform(xyz, slice.xy_to_ijk)]
    if children_info is not None:
        ijk = [
            min(max(v, 0), max(info.count - 1, 0))
            for v, info in zip(ijk, children_info)
        ]
    return tuple(ijk)


def project_to_axes(children_info, ras):
    """Get the slice index through a world point along each of the three stacks.

    Each index is ``round((normal . ras + origin_d) / spacing)``, rounded
    half up, then clamped: values at or beyond the count become
    ``count - 1``, negative values become 0.
    """
    indices = []
    for info in children_info:
        d = float(np.dot(info.slice_normal, ras)) + info.origin_d
        index = round_half_up(d / info.slice_spacing)
        if index >= info.count:
            index = info.count - 1
        elif index < 0:
            index = 0
        indices.append(index)
    return tuple(indices)


def pick_slice(
    volume,
    orientation,
    x,
    y,
    viewport_size,
    scale,
    pan,
    quarter_turns=0,
    flip_rows=1,
    flip_columns=1,
):
    """Pick a screen point on the current slice of a volume.

    Returns a tuple ``(PickResult, (px, py))``, where (px, py) are the
    continuous pixel coordinates on the stored slice, or None if the
    point is not on the slice (or there is no current slice).
    """
    orientation = Orientation.from_name(orientation)
    axis = orientation.index
    slice = volume.children[axis].get(volume.indices[axis])
    if slice is None:
        return None

    geometry = SliceGeometry.from_slice(slice, orientation)
    cx, cy = canonicalize_point(
        x, y, orientation, viewport_size, scale, pan, quarter_turns, flip_rows, flip_columns
    )
    pixel = pick_pixel(geometry, cx, cy, viewport_size, scale, pan)
    if pixel is None:
        return None

    px, py = pixel
    ijk = xy_to_index(slice, px, py, volume.children_info)
    ras = xy_to_world(slice, px, py)
    axis_indices = project_to_axes(volume.children_info, ras)
    return PickResult(axis_indices, ijk, ras), pixel


def xy2ijk(volume, orientation, x, y, viewport_size, scale, pan, **view_state):
    """Pick a screen point on the current slice of a volume.

    Returns a ``PickResult`` or None. The ``view_state`` holds the
    ``quarter_turns``, ``flip_rows`` and ``flip_columns`` of the renderer.
    """
    picked = pick_slice(volume, orientation, x, y, viewport_size, scale, pan, **view_state)
    return None if picked is None else picked[0]
