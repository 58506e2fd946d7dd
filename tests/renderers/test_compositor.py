import numpy as np

from sliceview import Canvas, Volume
from sliceview.renderers.slice2d import SliceBuffers
from sliceview.renderers.slice2d._compositor import (
    draw_pointer,
    normalized_scale,
    render_buffers,
    total_quarter_turns,
    POINTER_COLOR,
)
from sliceview.utils.color import Color


def make_volume(labels=None):
    data = np.zeros((2, 2, 1))
    data[1, 0, 0] = 85
    data[0, 1, 0] = 170
    data[1, 1, 0] = 255
    colortable = {1: (255, 0, 0, 255)}
    return Volume.from_numpy(data, labels=labels, colortable=colortable)


def render(volume, size=(2, 2), zoom=1.0, **kwargs):
    canvas = Canvas(*size)
    buffers = SliceBuffers()
    stack = volume.children[2]
    buffers.refresh(volume, stack, 0)
    view = np.eye(4).reshape(-1)
    view[14] = zoom
    render_buffers(
        canvas.get_context(),
        buffers,
        stack[0],
        "z",
        view,
        labelmap=volume.labelmap,
        **kwargs,
    )
    return canvas.data


def test_normalized_scale():
    view = np.eye(4).reshape(-1)
    view[14] = 2.5
    assert normalized_scale(view) == 2.5
    view[14] = 0
    assert normalized_scale(view) > 0


def test_total_quarter_turns():
    assert total_quarter_turns("z", 0) == 0
    assert total_quarter_turns("coronal", 3) == 3
    assert total_quarter_turns("x", 0) == 1
    assert total_quarter_turns("x", 1) == 2


def test_render_identity():
    data = render(make_volume())
    assert data[..., 0].tolist() == [[255, 170], [85, 0]]
    assert np.all(data[..., 3] == 255)


def test_render_zoomed_and_centered():
    data = render(make_volume(), size=(6, 4), zoom=2)
    gray = data[..., 0].tolist()
    assert gray[0] == [0, 255, 255, 170, 170, 0]
    assert gray[3] == [0, 85, 85, 0, 0, 0]
    # Outside the slice nothing is drawn
    assert data[:, 0, 3].tolist() == [0, 0, 0, 0]


def test_render_rotated_and_flipped():
    data = render(make_volume(), quarter_turns=1)
    assert data[..., 0].tolist() == [[85, 255], [0, 170]]

    data = render(make_volume(), flip_columns=-1)
    assert data[..., 0].tolist() == [[170, 255], [0, 85]]

    data = render(make_volume(), flip_rows=-1)
    assert data[..., 0].tolist() == [[85, 0], [255, 170]]


def test_render_labels():
    labels = np.zeros((2, 2, 1), np.int32)
    labels[1, 1, 0] = 1
    volume = make_volume(labels)

    data = render(volume)
    assert data[0, 0].tolist() == [255, 0, 0, 255]
    assert data[0, 1].tolist() == [170, 170, 170, 255]

    volume.labelmap.opacity = 0.5
    data = render(volume)
    assert data[0, 0].tolist() == [255, 128, 128, 255]

    volume.labelmap.visible = False
    data = render(volume)
    assert data[0, 0].tolist() == [255, 255, 255, 255]


def test_render_resets_context():
    canvas = Canvas(2, 2)
    ctx = canvas.get_context()
    ctx.translate(5, 5)
    before = ctx.transform
    volume = make_volume()
    buffers = SliceBuffers()
    buffers.refresh(volume, volume.children[2], 0)
    view = np.eye(4).reshape(-1)
    view[14] = 1
    render_buffers(ctx, buffers, volume.children[2][0], "z", view)
    assert np.all(ctx.transform == before)
    assert canvas.data[0, 0, 0] == 255


def test_draw_pointer():
    canvas = Canvas(21, 21)
    ctx = canvas.get_context()
    ctx.scale(3, 3)
    draw_pointer(ctx, 10, 10)

    color = list(Color(POINTER_COLOR).to_bytes())
    # The arms run down from the tip, in screen space
    assert canvas.data[15, 14].tolist() == color
    assert canvas.data[15, 5].tolist() == color
    assert canvas.data[0, 0, 3] == 0
    assert canvas.data[10, 0, 3] == 0
    assert canvas.data[8, 10, 3] == 0
