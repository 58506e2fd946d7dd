from time import perf_counter_ns

import numpy as np


class Camera2D:
    """A pan/zoom camera for 2D slice views.

    The camera state is a 16-element view array, laid out like a
    column-major 4x4 matrix. The pan offsets are stored at indices 12
    (x, screen units, positive is right) and 13 (y, positive is up),
    and the zoom factor at index 14. The renderer only reads the view;
    controllers and applications modify it with ``pan()``, ``zoom()``
    and ``reset()``.
    """

    PAN_X = 12
    PAN_Y = 13
    ZOOM = 14

    def __init__(self):
        self._view = np.eye(4, dtype=np.float64).reshape(-1)
        self._view[self.ZOOM] = 1.0
        self._last_modified = perf_counter_ns()

    def __repr__(self):
        return f"<sliceview.Camera2D pan=({self.pan_x:g}, {self.pan_y:g}) zoom={self.zoom:g}>"

    def flag_update(self):
        self._last_modified = perf_counter_ns()

    @property
    def last_modified(self) -> int:
        return self._last_modified

    @property
    def view(self) -> np.ndarray:
        """The 16-element view array."""
        return self._view

    @property
    def pan_x(self) -> float:
        return float(self._view[self.PAN_X])

    @property
    def pan_y(self) -> float:
        return float(self._view[self.PAN_Y])

    @property
    def zoom(self) -> float:
        """The zoom factor, i.e. screen pixels per world unit."""
        return float(self._view[self.ZOOM])

    @zoom.setter
    def zoom(self, value):
        self._view[self.ZOOM] = float(value)
        self.flag_update()

    def pan(self, dx, dy):
        """Move the view by the given offset, in world units."""
        self._view[self.PAN_X] += float(dx)
        self._view[self.PAN_Y] += float(dy)
        self.flag_update()

    def zoom_by(self, factor):
        """Multiply the zoom factor, keeping it positive."""
        self._view[self.ZOOM] = max(self._view[self.ZOOM] * float(factor), 1e-4)
        self.flag_update()

    def reset(self):
        """Reset pan and zoom to the identity view."""
        self._view[:] = np.eye(4, dtype=np.float64).reshape(-1)
        self._view[self.ZOOM] = 1.0
        self.flag_update()

    def get_state(self):
        """Get the state of the camera as a dict with "pan_x", "pan_y" and "zoom"."""
        return {"pan_x": self.pan_x, "pan_y": self.pan_y, "zoom": self.zoom}

    def set_state(self, state):
        """Set the state of the camera from a dict, as returned by ``get_state()``."""
        for key, value in state.items():
            if key == "pan_x":
                self._view[self.PAN_X] = float(value)
            elif key == "pan_y":
                self._view[self.PAN_Y] = float(value)
            elif key == "zoom":
                self._view[self.ZOOM] = float(value)
            else:
                raise KeyError(f"Invalid camera state key: {key!r}")
        self.flag_update()
