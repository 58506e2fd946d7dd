import cv2
import numpy as np
import pylinalg as la

from ..objects._events import EventTarget
from ..utils import assert_type
from ..utils.color import Color


class Canvas(EventTarget):
    """An in-memory RGBA drawing surface.

    The pixels are stored in a ``(height, width, 4)`` uint8 array, with
    non-premultiplied alpha. A canvas is also an event target: GUI
    integrations feed pointer, wheel, key and resize events into it with
    ``handle_event()``, which an ``Interactor`` listens to.

    Parameters
    ----------
    width : int
        The width in pixels.
    height : int
        The height in pixels.

    """

    def __init__(self, width=1, height=1):
        super().__init__()
        self._data = np.zeros((1, 1, 4), np.uint8)
        self._context = None
        self.resize(width, height)

    def __repr__(self):
        return f"<sliceview.Canvas {self.width}x{self.height} at {hex(id(self))}>"

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    def get_logical_size(self):
        """Get the size of the canvas as a (width, height) tuple."""
        return self.width, self.height

    @property
    def data(self) -> np.ndarray:
        """The ``(height, width, 4)`` RGBA pixel array."""
        return self._data

    def resize(self, width, height):
        """Set the size of the canvas. This clears its content, unless
        the size is unchanged.
        """
        width, height = max(int(width), 1), max(int(height), 1)
        if (width, height) != (self.width, self.height):
            self._data = np.zeros((height, width, 4), np.uint8)

    def get_context(self):
        """Get the 2D drawing context of this canvas."""
        if self._context is None:
            self._context = Context2D(self)
        return self._context

    def put_image_data(self, data):
        """Replace all pixels with the given RGBA data, flat or shaped."""
        data = np.asarray(data, np.uint8)
        self._data[...] = data.reshape(self._data.shape)

    def snapshot(self) -> np.ndarray:
        """Get a copy of the pixels, as a ``(height, width, 4)`` uint8 array."""
        return self._data.copy()


class Context2D:
    """A 2D drawing context, with an affine transform, on a Canvas.

    Transforms are composed like the HTML canvas API: each of
    ``translate()``, ``rotate()`` and ``scale()`` is applied in user
    space, i.e. post-multiplied with the current transform. The
    transform is kept as a 4x4 matrix acting on (x, y, 0, 1).
    """

    def __init__(self, canvas):
        assert_type("canvas", canvas, Canvas)
        self._canvas = canvas
        self._transform = np.eye(4)
        self._global_alpha = 1.0
        self._stack = []

    @property
    def canvas(self) -> Canvas:
        return self._canvas

    @property
    def transform(self) -> np.ndarray:
        """The current transform, a 4x4 matrix (read-only copy)."""
        return self._transform.copy()

    @property
    def global_alpha(self) -> float:
        """The alpha applied to everything that is drawn, between 0 and 1."""
        return self._global_alpha

    @global_alpha.setter
    def global_alpha(self, value):
        self._global_alpha = min(max(float(value), 0.0), 1.0)

    def save(self):
        """Push the transform and global alpha onto a stack."""
        self._stack.append((self._transform.copy(), self._global_alpha))

    def restore(self):
        """Pop the transform and global alpha from the stack."""
        if self._stack:
            self._transform, self._global_alpha = self._stack.pop()

    def set_transform(self, a=1, b=0, c=0, d=1, e=0, f=0):
        """Replace the transform with ``x' = a*x + c*y + e``, ``y' = b*x + d*y + f``."""
        m = np.eye(4)
        m[0, 0], m[1, 0], m[0, 1], m[1, 1] = a, b, c, d
        m[0, 3], m[1, 3] = e, f
        self._transform = m

    def translate(self, x, y):
        self._transform = self._transform @ la.mat_from_translation((x, y, 0))

    def scale(self, x, y):
        self._transform = self._transform @ la.mat_from_scale((x, y, 1))

    def rotate(self, angle):
        """Rotate by the given angle in radians, clockwise on screen."""
        m = la.mat_from_axis_angle((0, 0, 1), angle)
        # Keep quarter turns exact
        m[np.abs(m) < 1e-12] = 0
        self._transform = self._transform @ m

    def clear_rect(self, x, y, width, height):
        """Make a rectangle transparent. The rectangle is in device pixels,
        the transform is not applied.
        """
        x0, y0, x1, y1 = self._clip_box(x, y, x + width, y + height)
        self._canvas.data[y0:y1, x0:x1] = 0

    def clear(self):
        """Make the whole canvas transparent."""
        self._canvas.data[...] = 0

    def draw_image(self, image, dx, dy, dw=None, dh=None):
        """Draw an image into the rectangle (dx, dy, dw, dh) in user space.

        Sampling is nearest-neighbour: each device pixel center is mapped
        through the inverse transform onto the image. The result is
        composited over the existing content, using the image alpha
        times ``global_alpha``.
        """
        if isinstance(image, Canvas):
            image = image.data
        image = np.ascontiguousarray(image, np.uint8)
        ih, iw = image.shape[:2]
        dw = iw if dw is None else float(dw)
        dh = ih if dh is None else float(dh)
        if dw <= 0 or dh <= 0 or self._global_alpha <= 0:
            return

        # Device-space bounding box of the destination quad
        corners = np.array([[dx, dy, 0], [dx + dw, dy, 0], [dx, dy + dh, 0], [dx + dw, dy + dh, 0]], np.float64)
        device = la.vec_transform(corners, self._transform)
        x0, y0, x1, y1 = self._clip_box(
            np.floor(device[:, 0].min()),
            np.floor(device[:, 1].min()),
            np.ceil(device[:, 0].max()),
            np.ceil(device[:, 1].max()),
        )
        if x1 <= x0 or y1 <= y0:
            return

        # From the pixel indices of the box to the pixel indices of the
        # image; opencv puts pixel centers at integer coordinates.
        m = (
            la.mat_from_translation((-0.5, -0.5, 0))
            @ la.mat_from_scale((iw / dw, ih / dh, 1))
            @ la.mat_from_translation((-dx, -dy, 0))
            @ la.mat_inverse(self._transform)
            @ la.mat_from_translation((x0 + 0.5, y0 + 0.5, 0))
        )
        src = cv2.warpAffine(
            image,
            m[:2][:, [0, 1, 3]],
            (x1 - x0, y1 - y0),
            flags=cv2.INTER_NEAREST | cv2.WARP_INVERSE_MAP,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(0, 0, 0, 0),
        )
        self._composite(src, x0, y0, src[..., 3] > 0)

    def stroke_polyline(self, points, color="#000", line_width=1.0):
        """Draw a line through the given (x, y) points in user space.

        The line width is in device pixels.
        """
        pts = np.asarray(points, np.float64).reshape(-1, 2)
        if len(pts) < 2:
            return
        pts = la.vec_transform(np.column_stack([pts, np.zeros(len(pts))]), self._transform)[:, :2]
        thickness = max(int(round(float(line_width))), 1)
        half = thickness / 2 + 1
        rgba = tuple(int(v) for v in Color(color).to_bytes())

        x0, y0, x1, y1 = self._clip_box(
            np.floor(pts[:, 0].min() - half),
            np.floor(pts[:, 1].min() - half),
            np.ceil(pts[:, 0].max() + half),
            np.ceil(pts[:, 1].max() + half),
        )
        if x1 <= x0 or y1 <= y0:
            return

        # Fixed point with 4 fractional bits, relative to the box
        local = (pts - 0.5 - (x0, y0)) * 16
        local = np.round(local).astype(np.int32).reshape(-1, 1, 2)
        layer = np.zeros((y1 - y0, x1 - x0, 4), np.uint8)
        cv2.polylines(layer, [local], False, rgba, thickness, cv2.LINE_8, 4)
        self._composite(layer, x0, y0, layer[..., 3] > 0)

    # %% Internals

    def _clip_box(self, x0, y0, x1, y1):
        w, h = self._canvas.width, self._canvas.height
        x0 = int(min(max(x0, 0), w))
        x1 = int(min(max(x1, 0), w))
        y0 = int(min(max(y0, 0), h))
        y1 = int(min(max(y1, 0), h))
        return x0, y0, x1, y1

    def _composite(self, src, x0, y0, mask):
        """Source-over compositing of src onto the canvas region at (x0, y0)."""
        h, w = src.shape[:2]
        dst = self._canvas.data[y0 : y0 + h, x0 : x0 + w]

        src_a = src[..., 3:4].astype(np.float64) / 255 * self._global_alpha
        dst_a = dst[..., 3:4].astype(np.float64) / 255
        out_a = src_a + dst_a * (1 - src_a)
        rgb = src[..., :3] * src_a + dst[..., :3] * dst_a * (1 - src_a)
        out_rgb = np.zeros(rgb.shape, np.float64)
        np.divide(rgb, out_a, out=out_rgb, where=out_a > 0)

        out = np.concatenate([out_rgb, out_a * 255], axis=-1)
        out = np.floor(out + 0.5).clip(0, 255).astype(np.uint8)
        dst[mask] = out[mask]
