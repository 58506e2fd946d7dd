import numpy as np

from ..utils import assert_type


class Slice:
    """A 2D cross-section of a volume, at one index along one axis.

    A slice holds its pixel data in the order in which it is drawn: row
    ``r``, column ``c`` is element ``r * width + c``. Its geometry is
    expressed in a slice-local "XY" frame, where x runs along the width,
    y along the height and z is the position of the plane. The two
    matrices map (x, y, z, 1) in that frame to continuous voxel indices
    and to world (RAS) coordinates respectively.

    Slices are immutable once created; the arrays are made read-only.

    Parameters
    ----------
    width : int
        The number of columns.
    height : int
        The number of rows.
    width_spacing : float
        The physical size of a pixel along the width.
    height_spacing : float
        The physical size of a pixel along the height.
    data : ndarray
        The normalized intensities, uint8 with ``width * height`` elements.
    xy_bbox : tuple
        The extents (xmin, xmax, ymin, ymax, zmin, zmax) in the XY frame.
    xy_to_ijk : ndarray
        4x4 matrix mapping XY coordinates to continuous voxel indices,
        in which voxel ``n`` covers the range ``[n, n+1)``.
    xy_to_ras : ndarray
        4x4 matrix mapping XY coordinates to world coordinates.
    labelmap : ndarray | None
        Optional RGBA label colors, uint8 with ``width * height * 4`` elements.

    """

    def __init__(
        self,
        width,
        height,
        width_spacing,
        height_spacing,
        data,
        xy_bbox,
        xy_to_ijk,
        xy_to_ras,
        labelmap=None,
    ):
        self._width = int(width)
        self._height = int(height)
        if self._width <= 0 or self._height <= 0:
            raise ValueError(f"Slice must have a positive size, got {width}x{height}")
        self._width_spacing = float(width_spacing)
        self._height_spacing = float(height_spacing)
        if self._width_spacing <= 0 or self._height_spacing <= 0:
            raise ValueError("Slice spacing must be positive.")

        assert_type("data", data, np.ndarray)
        data = np.ascontiguousarray(data, dtype=np.uint8).reshape(-1)
        if data.size != self._width * self._height:
            raise ValueError(
                f"Slice data has {data.size} elements, expected {self._width * self._height}."
            )
        data.flags.writeable = False
        self._data = data

        if labelmap is not None:
            assert_type("labelmap", labelmap, np.ndarray)
            labelmap = np.ascontiguousarray(labelmap, dtype=np.uint8).reshape(-1)
            if labelmap.size != self._width * self._height * 4:
                raise ValueError(
                    f"Slice labelmap has {labelmap.size} elements, expected {self._width * self._height * 4}."
                )
            labelmap.flags.writeable = False
        self._labelmap = labelmap

        self._xy_bbox = tuple(float(v) for v in xy_bbox)
        if len(self._xy_bbox) != 6:
            raise ValueError("xy_bbox must have 6 values.")
        self._xy_to_ijk = _readonly_matrix(xy_to_ijk)
        self._xy_to_ras = _readonly_matrix(xy_to_ras)

    def __repr__(self):
        return f"<sliceview.Slice {self._width}x{self._height} at z={self.z:g}>"

    @property
    def width(self) -> int:
        """The number of pixel columns."""
        return self._width

    @property
    def height(self) -> int:
        """The number of pixel rows."""
        return self._height

    @property
    def width_spacing(self) -> float:
        return self._width_spacing

    @property
    def height_spacing(self) -> float:
        return self._height_spacing

    @property
    def data(self) -> np.ndarray:
        """The normalized intensities (0-255), flat, in drawing order."""
        return self._data

    @property
    def labelmap(self):
        """The RGBA label colors (flat, 4 bytes per pixel), or None."""
        return self._labelmap

    @property
    def xy_bbox(self) -> tuple:
        """The extents (xmin, xmax, ymin, ymax, zmin, zmax) in the XY frame."""
        return self._xy_bbox

    @property
    def wmin(self) -> float:
        """The minimum x (along the width) in the XY frame."""
        return self._xy_bbox[0]

    @property
    def hmin(self) -> float:
        """The minimum y (along the height) in the XY frame."""
        return self._xy_bbox[2]

    @property
    def z(self) -> float:
        """The position of the slice plane in the XY frame."""
        return self._xy_bbox[4]

    @property
    def xy_to_ijk(self) -> np.ndarray:
        return self._xy_to_ijk

    @property
    def xy_to_ras(self) -> np.ndarray:
        return self._xy_to_ras


class SliceStack:
    """The ordered slices of a volume along one axis."""

    def __init__(self, slices=()):
        self._slices = list(slices)
        for s in self._slices:
            assert_type("slices", s, Slice)

    def __len__(self):
        return len(self._slices)

    def __getitem__(self, index):
        return self._slices[index]

    def __iter__(self):
        return iter(self._slices)

    def get(self, index):
        """Get the slice at the given index, or None if there is no such slice."""
        if 0 <= index < len(self._slices):
            return self._slices[index]
        return None


def _readonly_matrix(m):
    m = np.array(m, dtype=np.float64).reshape(4, 4)
    m.flags.writeable = False
    return m
