import numpy as np
import pylinalg as la
import pytest

from sliceview import Volume
from sliceview.objects import AxisInfo
from sliceview.renderers.slice2d import SliceGeometry, project_to_axes
from sliceview.renderers.slice2d._mapping import (
    canonicalize_point,
    decanonicalize_point,
    pick_pixel,
    pick_slice,
    pixel_to_screen,
    rotation_matrix,
    xy2ijk,
)
from sliceview.utils.enums import Orientation


@pytest.fixture
def volume():
    # An axial slice of 100x80 pixels, with unit spacing
    return Volume.from_numpy(np.zeros((100, 80, 3)))


def pick(volume, x, y, orientation="z", viewport=(100, 80), **view_state):
    return xy2ijk(volume, orientation, x, y, viewport, 1.0, (0.0, 0.0), **view_state)


def test_pick_containment(volume):
    # The borders are inside
    for x, y in [(0, 0), (100, 0), (0, 80), (100, 80), (50, 40)]:
        assert pick(volume, x, y) is not None

    # One unit outside is not
    for x, y in [(-1, 40), (101, 40), (50, -1), (50, 81)]:
        assert pick(volume, x, y) is None


def test_pick_border_voxels(volume):
    # Screen left shows the patient's right, i.e. the highest i
    assert pick(volume, 0, 0).slice_indices == (99, 79, 1)
    assert pick(volume, 100, 80).slice_indices == (0, 0, 1)


def test_pick_center(volume):
    result = pick(volume, 50.5, 40.5)
    assert result.slice_indices == (49, 39, 1)
    assert result.world == pytest.approx((49, 39, 1))
    assert result.axis_indices == (49, 39, 1)


def test_pick_with_pan_and_zoom(volume):
    # Zoomed in by 2 and panned right by 10 world units
    args = ((100, 80), 2.0, (10.0, 0.0))
    left, top, width, height = SliceGeometry.from_slice(
        volume.children[2][1], "z"
    ).screen_rect(*args)
    assert (left, top, width, height) == (-30, -40, 200, 160)
    assert xy2ijk(volume, "z", 69.5, 0.5, *args).slice_indices == (50, 59, 1)


def test_pick_sagittal():
    volume = Volume.from_numpy(np.zeros((4, 3, 2)))
    x_slice = volume.children[0][2]
    geometry = SliceGeometry.from_slice(x_slice, "sagittal")
    # Displayed with a quarter turn
    assert (geometry.width, geometry.height) == (3, 2)

    # Top-left is anterior and superior
    result = pick(volume, 0.5, 0.5, "x", viewport=(3, 2))
    assert result.slice_indices == (2, 2, 1)
    assert pick(volume, 3.5, 1, "x", viewport=(3, 2)) is None


def test_pick_coronal():
    volume = Volume.from_numpy(np.zeros((4, 3, 2)))
    # Top-left is right and superior
    result = pick(volume, 0.5, 0.5, "y", viewport=(4, 2))
    assert result.slice_indices == (3, 1, 1)
    result = pick(volume, 3.5, 1.5, "y", viewport=(4, 2))
    assert result.slice_indices == (0, 1, 0)


def test_pick_rotated_and_flipped():
    volume = Volume.from_numpy(np.zeros((4, 4, 1)))
    viewport = (4, 4)
    # After a clockwise quarter turn, the top-left shows what was bottom-left
    rotated = pick(volume, 0.5, 0.5, viewport=viewport, quarter_turns=1)
    assert rotated == pick(volume, 0.5, 3.5, viewport=viewport)

    flipped = pick(volume, 0.5, 1.5, viewport=viewport, flip_columns=-1)
    assert flipped == pick(volume, 3.5, 1.5, viewport=viewport)

    flipped = pick(volume, 0.5, 1.5, viewport=viewport, flip_rows=-1)
    assert flipped == pick(volume, 0.5, 2.5, viewport=viewport)


def test_pick_without_slice():
    assert pick(Volume(), 1, 1, viewport=(4, 4)) is None


def test_rotation_matrix():
    assert np.all(rotation_matrix(Orientation.Z) == np.eye(2))
    assert np.all(rotation_matrix(Orientation.X) == [[0, -1], [1, 0]])
    assert np.all(rotation_matrix(Orientation.Z, 2) == -np.eye(2))
    assert np.all(rotation_matrix(Orientation.Y, 0, 1, -1) == [[-1, 0], [0, 1]])
    # Flips swap axes under an odd number of turns
    assert np.all(rotation_matrix(Orientation.Z, 1, -1, 1) == [[0, -1], [-1, 0]])


@pytest.mark.parametrize("orientation", ["x", "y", "z"])
def test_canonicalize_round_trip(orientation):
    args = ((120, 90), 1.5, (3.0, -2.0))
    for turns in range(4):
        for flip_rows in (1, -1):
            for flip_columns in (1, -1):
                view_state = (turns, flip_rows, flip_columns)
                x, y = canonicalize_point(17, 33, orientation, *args, *view_state)
                x, y = decanonicalize_point(x, y, orientation, *args, *view_state)
                assert x == pytest.approx(17)
                assert y == pytest.approx(33)

    # Without rotation and flips, points are unchanged
    assert canonicalize_point(17, 33, orientation, *args) == pytest.approx((17, 33))


@pytest.mark.parametrize("orientation", ["x", "y", "z"])
def test_pixel_round_trip(orientation):
    volume = Volume.from_numpy(np.zeros((5, 6, 7)), spacing=(1, 2, 0.5))
    axis = Orientation.from_name(orientation).index
    geometry = SliceGeometry.from_slice(volume.children[axis][0], orientation)
    args = ((64, 48), 1.25, (1.0, 2.0))

    for px, py in [(0.5, 0.5), (1.25, 2.75), (3, 1)]:
        x, y = pixel_to_screen(geometry, px, py, *args)
        assert pick_pixel(geometry, x, y, *args) == pytest.approx((px, py))


def test_project_to_axes():
    info = [
        AxisInfo((1, 0, 0), 0, 1, 10),
        AxisInfo((0, 1, 0), -10, 2, 5),
        AxisInfo((0, 0, 1), 0, 1, 3),
    ]
    assert project_to_axes(info, (4.5, 14, 1.49)) == (5, 2, 1)

    # At or beyond the count
    assert project_to_axes(info, (9.5, 30, 3)) == (9, 4, 2)
    assert project_to_axes(info, (100, 100, 100)) == (9, 4, 2)

    # Negative
    assert project_to_axes(info, (-0.6, 0, -5)) == (0, 0, 0)
    assert project_to_axes(info, (-0.5, 9, 0)) == (0, 0, 0)


def test_pick_slice_returns_pixel(volume):
    result, pixel = pick_slice(
        volume, "z", 50.5, 40.5, (100, 80), 1.0, (0.0, 0.0)
    )
    assert pixel == pytest.approx((49.5, 39.5))
    assert result.slice_indices == (49, 39, 1)


@pytest.mark.parametrize("view_state", [(0, 1, 1), (1, 1, -1), (2, -1, 1)])
@pytest.mark.parametrize("orientation", ["x", "y", "z"])
def test_voxel_round_trip(orientation, view_state):
    spacing = np.array([0.5, 2, 1.5])
    origin = np.array([3, -4, 10])
    volume = Volume.from_numpy(np.zeros((5, 6, 7)), spacing=spacing, origin=origin)
    axis = Orientation.from_name(orientation).index
    args = ((64, 48), 1.25, (1.0, 2.0))
    turns, flip_rows, flip_columns = view_state

    for ijk in [(0, 0, 0), (4, 5, 6), (2, 1, 3)]:
        for name, index in zip("xyz", ijk):
            volume.set_index(name, index)
        world = origin + np.array(ijk) * spacing

        # From the voxel center to the screen
        slice = volume.children[axis][ijk[axis]]
        x, y, _ = la.vec_transform(world, la.mat_inverse(slice.xy_to_ras))
        px = (x - slice.wmin) / slice.width_spacing
        py = (y - slice.hmin) / slice.height_spacing
        geometry = SliceGeometry.from_slice(slice, orientation)
        sx, sy = pixel_to_screen(geometry, px, py, *args)
        sx, sy = decanonicalize_point(sx, sy, orientation, *args, *view_state)

        # And back
        result = xy2ijk(
            volume,
            orientation,
            sx,
            sy,
            *args,
            quarter_turns=turns,
            flip_rows=flip_rows,
            flip_columns=flip_columns,
        )
        assert result.slice_indices == ijk
        assert result.axis_indices == ijk
        assert result.world == pytest.approx(tuple(world))
