import numpy as np
import pytest
from pytest import raises

from sliceview import (
    Canvas,
    Camera2D,
    DisplayObject,
    InvalidOrientation,
    Orientation,
    SliceRenderer,
    Volume,
)
from sliceview.renderers import ObjectRegistry, RendererCore


def small_volume():
    data = np.zeros((2, 2, 1))
    data[1, 0, 0] = 85
    data[0, 1, 0] = 170
    data[1, 1, 0] = 255
    return Volume.from_numpy(data)


def test_renderer_core():
    core = RendererCore((3, 2))
    assert isinstance(core.canvas, Canvas)
    assert (core.width, core.height) == (3, 2)
    core.resize(5, 4)
    assert core.canvas.get_logical_size() == (5, 4)

    canvas = Canvas(7, 7)
    assert RendererCore(canvas).canvas is canvas

    with raises(TypeError):
        RendererCore(5)
    with raises(TypeError):
        RendererCore("foo")


def test_object_registry():
    registry = ObjectRegistry()
    volume = Volume()
    assert registry.add(volume)
    assert not registry.add(volume)
    assert volume in registry
    assert len(registry) == 1
    assert registry.get(volume.id) is volume
    assert list(registry) == [volume]
    assert registry.remove(volume)
    assert not registry.remove(volume)
    assert registry.get(volume.id) is None

    with raises(TypeError):
        registry.add("not an object")


def test_renderer_init():
    renderer = SliceRenderer((100, 80))
    assert renderer.orientation == Orientation.Z
    assert isinstance(renderer.camera, Camera2D)
    assert renderer.interactor.renderer is renderer
    assert (renderer.width, renderer.height) == (100, 80)
    assert renderer.volume is None
    assert renderer.current_slice is None
    assert renderer.slice_width == 0

    renderer = SliceRenderer(Canvas(10, 10), orientation="sagittal")
    assert renderer.orientation == Orientation.X

    with raises(InvalidOrientation):
        SliceRenderer((10, 10), orientation="w")
    with raises(TypeError):
        SliceRenderer((10, 10), camera="camera")


def test_invalid_orientation_keeps_state():
    renderer = SliceRenderer((100, 80), orientation="y")
    renderer.add(Volume.from_numpy(np.zeros((4, 3, 2))))
    zoom = renderer.camera.zoom

    for value in ["w", "", "diagonal", 2, None]:
        with raises(InvalidOrientation):
            renderer.orientation = value
        assert renderer.orientation == Orientation.Y
        assert renderer.camera.zoom == zoom


def test_orientation_change():
    renderer = SliceRenderer((200, 80))
    renderer.add(Volume.from_numpy(np.zeros((100, 80, 3))))
    renderer.render()
    assert renderer.buffers.current_slice == 1

    renderer.orientation = "x"
    assert renderer.orientation == Orientation.X
    assert renderer.buffers.current_slice == -1
    # Refitted to the sagittal slice, which is 80 wide and 3 high
    assert renderer.camera.zoom == 2.5
    assert (renderer.slice_width, renderer.slice_height) == (3, 80)


def test_auto_fit():
    volume = Volume.from_numpy(np.zeros((100, 80, 3)))
    for size, zoom in [((100, 80), 1), ((200, 80), 1), ((50, 80), 0.5)]:
        renderer = SliceRenderer(size)
        renderer.add(volume)
        assert renderer.camera.zoom == zoom
        assert renderer.normalized_scale == zoom

    renderer = SliceRenderer((100, 80))
    renderer.add(volume)
    renderer.rotate_quarter_turn()
    assert renderer.quarter_turns == 1
    assert renderer.camera.zoom == 0.8

    renderer.resize(200, 160)
    assert renderer.camera.zoom == 1.6


def test_render():
    renderer = SliceRenderer((2, 2))
    renderer.add(small_volume())
    renderer.render()
    image = renderer.snapshot()
    assert image[..., 0].tolist() == [[255, 170], [85, 0]]
    assert np.all(image[..., 3] == 255)


def test_render_nothing():
    renderer = SliceRenderer((2, 2))
    renderer.render()
    assert np.all(renderer.snapshot() == 0)

    # Only volumes are displayed
    renderer.add(DisplayObject())
    renderer.render()
    assert renderer.volume is None
    assert np.all(renderer.snapshot() == 0)


def test_render_invisible_volume():
    renderer = SliceRenderer((2, 2))
    volume = small_volume()
    renderer.add(volume)
    renderer.render()
    volume.visible = False
    renderer.render()
    assert np.all(renderer.snapshot() == 0)


def test_dirty_volume_is_deferred():
    renderer = SliceRenderer((50, 80))
    volume = Volume.from_numpy(np.ones((100, 80, 3)))
    volume.dirty = True
    renderer.add(volume)
    assert renderer.camera.zoom == 1
    renderer.render()
    assert renderer.buffers.update_count == 0

    volume.dirty = False
    renderer.update(volume)
    assert renderer.camera.zoom == 0.5
    renderer.render()
    assert renderer.buffers.update_count == 1


def test_render_uses_cache():
    renderer = SliceRenderer((2, 2))
    volume = small_volume()
    renderer.add(volume)
    renderer.render()
    renderer.render()
    renderer.camera.pan(1, 0)
    renderer.render()
    assert renderer.buffers.update_count == 1

    volume.window_high = 100
    renderer.render()
    assert renderer.buffers.update_count == 2


def test_flip_twice_restores():
    renderer = SliceRenderer((2, 2))
    renderer.add(small_volume())
    renderer.render()
    before = renderer.snapshot()

    renderer.flip_rows()
    assert renderer.flip_row_sign == -1
    renderer.render()
    assert not np.all(renderer.snapshot() == before)

    renderer.flip_rows()
    assert renderer.flip_row_sign == 1
    renderer.render()
    assert np.all(renderer.snapshot() == before)

    renderer.flip_columns()
    renderer.flip_columns()
    assert renderer.flip_column_sign == 1
    renderer.render()
    assert np.all(renderer.snapshot() == before)


def test_rotate_four_times():
    renderer = SliceRenderer((2, 2))
    renderer.add(small_volume())
    renderer.render()
    before = renderer.snapshot()
    for _ in range(4):
        renderer.rotate_quarter_turn()
    assert renderer.quarter_turns == 0
    renderer.render()
    assert np.all(renderer.snapshot() == before)


def test_scroll():
    events = []
    renderer = SliceRenderer((100, 80), on_scroll=events.append)
    volume = Volume.from_numpy(np.zeros((4, 3, 3)))
    renderer.add(volume)
    modified = []
    volume.add_event_handler(modified.append, "modified")

    renderer.scroll()
    assert volume.index_z == 2
    renderer.scroll()
    assert volume.index_z == 2
    renderer.scroll(up=False)
    renderer.scroll(up=False)
    renderer.scroll(up=False)
    assert volume.index_z == 0

    assert [e.index for e in events] == [2, 2, 1, 0, 0]
    assert events[0].orientation == Orientation.Z
    assert events[0].target is renderer
    assert len(modified) == 5


def test_window_level():
    events = []
    renderer = SliceRenderer((100, 80), on_window_level=events.append)
    renderer.window_level(1, 0)  # no volume, no-op
    assert events == []

    data = np.zeros((4, 3, 2))
    data[0, 0, 0] = -100
    data[1, 0, 0] = 200
    volume = Volume.from_numpy(data)
    volume.window_low, volume.window_high = 0, 100
    renderer.add(volume)
    renderer.window_level(1, 0)
    assert (events[0].window_low, events[0].window_high) == (-7, 107)
    assert (volume.window_low, volume.window_high) == (-7, 107)


def test_reset_view():
    renderer = SliceRenderer((100, 80))
    volume = Volume.from_numpy(np.arange(24.0).reshape(4, 3, 2))
    renderer.add(volume)
    volume.window_low, volume.window_high = 5, 6
    renderer.camera.pan(3, 4)
    renderer.camera.zoom = 7

    renderer.reset_view()
    assert (renderer.camera.pan_x, renderer.camera.pan_y) == (0, 0)
    assert renderer.camera.zoom == 25
    assert (volume.window_low, volume.window_high) == (0, 23)


def test_add_remove_get():
    renderer = SliceRenderer((10, 10))
    v1 = small_volume()
    v2 = small_volume()
    renderer.add(v1)
    renderer.add(v2)
    assert renderer.volume is v1
    assert renderer.get(v2.id) is v2

    renderer.remove(v1)
    assert renderer.volume is v2
    assert renderer.get(v1.id) is None
    renderer.remove(v1)


def test_xy2ijk():
    renderer = SliceRenderer((100, 80))
    assert renderer.xy2ijk(50, 40) is None
    renderer.add(Volume.from_numpy(np.zeros((100, 80, 3))))
    result = renderer.xy2ijk(50.5, 40.5)
    assert result.slice_indices == (49, 39, 1)
    assert renderer.xy2ijk(-1, 40) is None


@pytest.mark.parametrize("orientation", ["x", "y", "z"])
def test_render_all_orientations(orientation):
    renderer = SliceRenderer((40, 30), orientation=orientation)
    renderer.add(Volume.from_numpy(np.arange(60.0).reshape(5, 4, 3)))
    renderer.render()
    # Fitted, centered and opaque in the middle
    assert renderer.snapshot()[15, 20, 3] == 255
