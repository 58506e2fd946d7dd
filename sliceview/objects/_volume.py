from typing import NamedTuple

import numpy as np
import pylinalg as la

from ._base import DisplayObject
from ._slice import Slice, SliceStack
from ..utils import logger, assert_type
from ..utils.color import Color
from ..utils.enums import Orientation


SHOW_ALL = (-255.0, -255.0, -255.0, -255.0)


class AxisInfo(NamedTuple):
    """Plane geometry of one slice stack.

    The index of the slice through a world point ``p`` is
    ``(slice_normal . p + origin_d) / slice_spacing``, rounded.
    """

    slice_normal: tuple
    origin_d: float
    slice_spacing: float
    count: int


class Labelmap(DisplayObject):
    """A per-voxel label overlay of a volume.

    The label colors themselves live in the slices (``Slice.labelmap``);
    this object holds the display state of the overlay.

    Parameters
    ----------
    visible : bool
        Whether the overlay is drawn. Default True.
    opacity : float
        The opacity of the overlay, between 0 and 1. Default 1.
    show_only_color : tuple | None
        If given, only labels with exactly this RGBA (0-255) are shown.
    name : str
        The name of the labelmap.

    """

    def __init__(self, *, visible=True, opacity=1.0, show_only_color=None, name=""):
        super().__init__(visible=visible, name=name)
        self.opacity = opacity
        self.show_only_color = show_only_color

    @property
    def opacity(self) -> float:
        """The opacity of the overlay, between 0 and 1."""
        return self._opacity

    @opacity.setter
    def opacity(self, value):
        self._opacity = min(max(float(value), 0.0), 1.0)

    @property
    def show_only_color(self) -> tuple:
        """The RGBA label color to show exclusively.

        The sentinel ``(-255, -255, -255, -255)`` means all labels are shown.
        Set to None to show all labels.
        """
        return self._show_only_color

    @show_only_color.setter
    def show_only_color(self, color):
        if color is None:
            color = SHOW_ALL
        color = tuple(float(c) for c in color)
        if len(color) != 4:
            raise ValueError("show_only_color must have 4 components.")
        self._show_only_color = color

    @property
    def shows_all(self) -> bool:
        return self._show_only_color[3] == -255


class Volume(DisplayObject):
    """A 3D scalar field, stored as three orthogonal stacks of slices.

    Volumes are usually created by a loader, which fills ``children``
    and ``children_info`` and clears the ``dirty`` flag once done. Use
    ``Volume.from_numpy()`` to build one from an in-memory array.

    The display state (window, thresholds, colors and the three slice
    cursors) may be shared by several renderers; call ``modified()``
    after changing it from outside a renderer so that others are
    notified.

    Parameters
    ----------
    min : float
        The minimum scalar value of the data.
    max : float
        The maximum scalar value of the data.
    children : list
        Three SliceStack objects, for the X, Y and Z orientation.
    children_info : list
        Three AxisInfo objects, for the X, Y and Z orientation.
    labelmap : Labelmap | None
        The label overlay, if any.
    colortable : dict | None
        Mapping of label value to an RGBA color (0-255).
    visible : bool
        Whether the volume is visible.
    name : str
        The name of the volume.

    """

    def __init__(
        self,
        *,
        min=0.0,
        max=255.0,
        children=None,
        children_info=None,
        labelmap=None,
        colortable=None,
        visible=True,
        name="",
    ):
        super().__init__(visible=visible, name=name)
        self._min = float(min)
        self._max = float(max)
        if self._max < self._min:
            self._min, self._max = self._max, self._min

        if children is None:
            children = [SliceStack(), SliceStack(), SliceStack()]
        if len(children) != 3:
            raise ValueError("A volume needs exactly three slice stacks.")
        for stack in children:
            assert_type("children", stack, SliceStack)
        self._children = list(children)

        if children_info is None:
            children_info = [
                AxisInfo(tuple(float(v) for v in np.eye(3)[a]), 0.0, 1.0, len(s))
                for a, s in enumerate(self._children)
            ]
        if len(children_info) != 3:
            raise ValueError("A volume needs exactly three axis info records.")
        self._children_info = [AxisInfo(*info) for info in children_info]

        if labelmap is not None:
            assert_type("labelmap", labelmap, Labelmap)
        self.labelmap = labelmap
        self.colortable = colortable

        self._window_low = self._min
        self._window_high = self._max
        self._lower_threshold = self._min
        self._upper_threshold = self._max
        self._min_color = (0.0, 0.0, 0.0)
        self._max_color = (1.0, 1.0, 1.0)
        self._indices = [info.count // 2 for info in self._children_info]

    # --- data

    @property
    def min(self) -> float:
        """The minimum scalar value of the data."""
        return self._min

    @property
    def max(self) -> float:
        """The maximum scalar value of the data."""
        return self._max

    @property
    def children(self) -> list:
        """The three slice stacks, ordered X (sagittal), Y (coronal), Z (axial)."""
        return self._children

    @property
    def children_info(self) -> list:
        """The plane geometry of the three slice stacks."""
        return self._children_info

    @property
    def has_slices(self) -> bool:
        return any(len(stack) for stack in self._children)

    # --- window and thresholds

    @property
    def window_low(self) -> float:
        """The lower bound of the display window."""
        return self._window_low

    @window_low.setter
    def window_low(self, value):
        self._window_low = float(value)

    @property
    def window_high(self) -> float:
        """The upper bound of the display window."""
        return self._window_high

    @window_high.setter
    def window_high(self, value):
        self._window_high = float(value)

    def clamp_window(self):
        """Make sure that ``min <= window_low <= window_high <= max``."""
        low = min(max(self._window_low, self._min), self._max)
        high = min(max(self._window_high, self._min), self._max)
        if high < low:
            low, high = high, low
        self._window_low, self._window_high = low, high

    @property
    def lower_threshold(self) -> float:
        """Intensities below this value are not shown."""
        return self._lower_threshold

    @lower_threshold.setter
    def lower_threshold(self, value):
        value = float(value)
        if value > self._upper_threshold:
            logger.debug("lower_threshold above upper_threshold, clamping.")
            value = self._upper_threshold
        self._lower_threshold = value

    @property
    def upper_threshold(self) -> float:
        """Intensities above this value are not shown."""
        return self._upper_threshold

    @upper_threshold.setter
    def upper_threshold(self, value):
        value = float(value)
        if value < self._lower_threshold:
            logger.debug("upper_threshold below lower_threshold, clamping.")
            value = self._lower_threshold
        self._upper_threshold = value

    def set_thresholds(self, lower, upper):
        """Set both thresholds at once, swapping them if needed."""
        lower, upper = float(lower), float(upper)
        if upper < lower:
            lower, upper = upper, lower
        self._lower_threshold, self._upper_threshold = lower, upper

    @property
    def min_color(self) -> tuple:
        """The RGB color (0-1) of the lowest displayed intensity."""
        return self._min_color

    @min_color.setter
    def min_color(self, color):
        self._min_color = Color(color).rgb

    @property
    def max_color(self) -> tuple:
        """The RGB color (0-1) of the highest displayed intensity."""
        return self._max_color

    @max_color.setter
    def max_color(self, color):
        self._max_color = Color(color).rgb

    # --- cursors

    @property
    def indices(self) -> tuple:
        """The slice cursors, one per orientation (X, Y, Z)."""
        return tuple(self._indices)

    def get_index(self, orientation) -> int:
        """Get the slice cursor of the given orientation."""
        return self._indices[Orientation.from_name(orientation).index]

    def set_index(self, orientation, index):
        """Set the slice cursor of the given orientation, clamped to the stack."""
        axis = Orientation.from_name(orientation).index
        count = self._children_info[axis].count
        self._indices[axis] = int(min(max(int(index), 0), max(count - 1, 0)))

    @property
    def index_x(self) -> int:
        return self._indices[0]

    @index_x.setter
    def index_x(self, index):
        self.set_index(Orientation.X, index)

    @property
    def index_y(self) -> int:
        return self._indices[1]

    @index_y.setter
    def index_y(self, index):
        self.set_index(Orientation.Y, index)

    @property
    def index_z(self) -> int:
        return self._indices[2]

    @index_z.setter
    def index_z(self, index):
        self.set_index(Orientation.Z, index)

    # --- construction

    @classmethod
    def from_numpy(
        cls,
        data,
        spacing=(1.0, 1.0, 1.0),
        origin=(0.0, 0.0, 0.0),
        labels=None,
        colortable=None,
        **kwargs,
    ):
        """Create a volume from a 3D numpy array.

        The array is indexed ``data[i, j, k]``, with i along the world X
        (right), j along Y (anterior) and k along Z (superior). The
        ``origin`` is the world position of the center of voxel (0, 0, 0).

        Slices are laid out in radiological convention: axial and coronal
        slices show the patient's right on the left of the image, and
        superior/anterior towards the top.

        Parameters
        ----------
        data : ndarray
            The scalar data, 3D.
        spacing : tuple
            The voxel size along x, y and z.
        origin : tuple
            The world position of the first voxel.
        labels : ndarray | None
            Integer label ids, with the same shape as ``data``.
        colortable : dict | None
            Mapping of label id to an RGBA color (0-255). Labels that are not
            in the table (and label 0) are transparent.
        kwargs : dict
            Passed to the Volume constructor.

        """
        data = np.asarray(data)
        if data.ndim != 3:
            raise ValueError(f"Volume data must be 3D, got shape {data.shape}")
        if 0 in data.shape:
            raise ValueError("Volume data must not be empty.")
        spacing = tuple(float(s) for s in spacing)
        origin = tuple(float(o) for o in origin)
        if len(spacing) != 3 or len(origin) != 3:
            raise ValueError("spacing and origin must have 3 values.")
        if any(s <= 0 for s in spacing):
            raise ValueError("spacing must be positive.")

        vmin, vmax = float(data.min()), float(data.max())
        normalized = _normalize(data, vmin, vmax)

        label_rgba = None
        if labels is not None:
            labels = np.asarray(labels)
            if labels.shape != data.shape:
                raise ValueError(
                    f"Labels shape {labels.shape} does not match data shape {data.shape}"
                )
            label_rgba = _labels_to_rgba(labels, colortable or {})

        children = [
            SliceStack(_build_slices(normalized, label_rgba, spacing, origin, axis))
            for axis in range(3)
        ]
        children_info = [
            AxisInfo(
                tuple(float(v) for v in np.eye(3)[axis]),
                -origin[axis],
                spacing[axis],
                data.shape[axis],
            )
            for axis in range(3)
        ]
        labelmap = Labelmap() if labels is not None else None
        logger.debug(
            f"Built volume of shape {data.shape}, range [{vmin:g}, {vmax:g}]"
        )
        return cls(
            min=vmin,
            max=vmax,
            children=children,
            children_info=children_info,
            labelmap=labelmap,
            colortable=colortable,
            **kwargs,
        )


def _normalize(data, vmin, vmax):
    if vmax == vmin:
        return np.zeros(data.shape, np.uint8)
    scaled = (data.astype(np.float64) - vmin) * (255.0 / (vmax - vmin))
    return np.floor(scaled + 0.5).clip(0, 255).astype(np.uint8)


def _labels_to_rgba(labels, colortable):
    rgba = np.zeros(labels.shape + (4,), np.uint8)
    for label, color in colortable.items():
        if label == 0:
            continue
        color = np.asarray(color, np.float64).reshape(-1)
        if color.size == 3:
            color = np.append(color, 255)
        rgba[labels == label] = np.clip(color[:4], 0, 255).astype(np.uint8)
    return rgba


def _xy_to_ras(axis):
    """The matrix that maps a slice's XY frame to world coordinates."""
    if axis == 2:  # axial: R=x, A=y, S=z
        return np.eye(4)
    elif axis == 1:  # coronal: R=x, S=-y, A=z
        return np.array(
            [[1, 0, 0, 0], [0, 0, 1, 0], [0, -1, 0, 0], [0, 0, 0, 1]], np.float64
        )
    else:  # sagittal: S=-x, A=y, R=z
        return np.array(
            [[0, 0, 1, 0], [0, 1, 0, 0], [-1, 0, 0, 0], [0, 0, 0, 1]], np.float64
        )


def _build_slices(normalized, label_rgba, spacing, origin, axis):
    ni, nj, nk = normalized.shape
    sx, sy, sz = spacing
    ox, oy, oz = origin

    # Voxel n covers [n, n+1) in continuous index space
    ras_to_ijk = (
        la.mat_from_translation((0.5, 0.5, 0.5))
        @ la.mat_from_scale((1 / sx, 1 / sy, 1 / sz))
        @ la.mat_from_translation((-ox, -oy, -oz))
    )
    xy_to_ras = _xy_to_ras(axis)
    xy_to_ijk = ras_to_ijk @ xy_to_ras

    # The flipped world axis starts at minus its largest voxel edge
    s_top = -(oz + (nk - 1) * sz) - sz / 2
    if axis == 2:
        width, height, ws, hs = ni, nj, sx, sy
        wmin, hmin = ox - sx / 2, oy - sy / 2
        planes = [oz + k * sz for k in range(nk)]

        def take(vol, n):
            return vol[::-1, ::-1, n].swapaxes(0, 1)

    elif axis == 1:
        width, height, ws, hs = ni, nk, sx, sz
        wmin, hmin = ox - sx / 2, s_top
        planes = [oy + j * sy for j in range(nj)]

        def take(vol, n):
            return vol[::-1, n, ::-1].swapaxes(0, 1)

    else:
        width, height, ws, hs = nk, nj, sz, sy
        wmin, hmin = s_top, oy - sy / 2
        planes = [ox + i * sx for i in range(ni)]

        def take(vol, n):
            return vol[n, :, ::-1]

    slices = []
    for n, z in enumerate(planes):
        labelmap = None if label_rgba is None else take(label_rgba, n)
        slices.append(
            Slice(
                width,
                height,
                ws,
                hs,
                take(normalized, n),
                (wmin, wmin + width * ws, hmin, hmin + height * hs, z, z),
                xy_to_ijk,
                xy_to_ras,
                labelmap=labelmap,
            )
        )
    return slices
