from typing import NamedTuple

from .._base import Renderer, RendererCore
from ._buffers import SliceBuffers
from ._compositor import render_buffers, draw_pointer, normalized_scale
from ._mapping import (
    SliceGeometry,
    pick_slice,
    pixel_to_screen,
    decanonicalize_point,
)
from ._windowlevel import adjust_window_level
from ...cameras import Camera2D
from ...controllers import Interactor
from ...objects import (
    Event,
    EventTarget,
    Volume,
    ScrollEvent,
    WindowLevelEvent,
    SliceNavigationEvent,
)
from ...utils import logger, assert_type
from ...utils.enums import Orientation


class Pointer(NamedTuple):
    """The last point that was picked with the slice navigators."""

    #: The (continuous) pixel coordinates on the stored slice.
    pixel: tuple
    #: The voxel index (i, j, k).
    slice_indices: tuple
    #: The world (RAS) coordinate.
    world: tuple
    #: The orientation of the renderer at the time of picking.
    orientation: Orientation
    #: The slice index at the time of picking.
    slice_index: int


class SliceRenderer(Renderer, EventTarget):
    """Render one orthogonal slice of a volume onto a canvas.

    The renderer shows the slice of the first registered volume at the
    volume's cursor for the renderer's orientation. It applies the
    volume's window/level, thresholds, colors and label overlay, the
    camera's pan and zoom, and the renderer's own rotation and flips.

    Parameters
    ----------
    target : Canvas | tuple
        The canvas to render to, or a (width, height) to create one.
    camera : Camera2D | None
        The camera that provides pan and zoom. A new one is created if not given.
    interactor : Interactor | None
        The interactor that provides mouse/keyboard state. A new one is
        created if not given. It is connected to this renderer.
    orientation : str | Orientation
        The axis to show: 'x' (sagittal), 'y' (coronal) or 'z' (axial).
    slice_navigators : bool
        Whether shift+hover picks a point and moves all cursors there. Default False.
    on_scroll : callable | None
        Called with a ``ScrollEvent`` after scrolling.
    on_window_level : callable | None
        Called with a ``WindowLevelEvent`` after the window/level changed.
    on_slice_navigation : callable | None
        Called with a ``SliceNavigationEvent`` after the slice navigators moved the cursors.

    Events
    ------
    The renderer is an event target. It emits "scroll", "window_level",
    "slice_navigation" and "point" events.
    """

    def __init__(
        self,
        target,
        camera=None,
        interactor=None,
        *,
        orientation="z",
        slice_navigators=False,
        on_scroll=None,
        on_window_level=None,
        on_slice_navigation=None,
    ):
        super().__init__()
        self._core = RendererCore(target)
        self._context = self._core.canvas.get_context()

        if camera is None:
            camera = Camera2D()
        assert_type("camera", camera, Camera2D)
        self._camera = camera

        self._orientation = Orientation.from_name(orientation)
        self._slice_navigators = bool(slice_navigators)

        self._buffers = SliceBuffers()
        self._initialized = set()
        self._quarter_turns = 0
        self._flip_rows = 1
        self._flip_columns = 1
        self._pointer = None

        for callback, type in [
            (on_scroll, "scroll"),
            (on_window_level, "window_level"),
            (on_slice_navigation, "slice_navigation"),
        ]:
            if callback is not None:
                self.add_event_handler(callback, type)

        if interactor is None:
            interactor = Interactor()
        assert_type("interactor", interactor, Interactor)
        self._interactor = interactor
        interactor.connect(self)

    def __repr__(self):
        return f"<sliceview.SliceRenderer {self._orientation.anatomical_name} {self.width}x{self.height} at {hex(id(self))}>"

    # %% Properties

    @property
    def canvas(self):
        """The canvas that this renderer draws to."""
        return self._core.canvas

    @property
    def camera(self):
        return self._camera

    @property
    def interactor(self):
        return self._interactor

    @property
    def buffers(self):
        """The off-screen buffer engine (for inspection)."""
        return self._buffers

    @property
    def width(self) -> int:
        return self._core.width

    @property
    def height(self) -> int:
        return self._core.height

    @property
    def orientation(self) -> Orientation:
        """The orientation of the shown slices.

        Can be set with an axis letter ('x', 'y', 'z'), an anatomical name
        ('sagittal', 'coronal', 'axial'), or an ``Orientation``. Invalid
        values raise ``InvalidOrientation``, leaving the orientation unchanged.
        """
        return self._orientation

    @orientation.setter
    def orientation(self, orientation):
        orientation = Orientation.from_name(orientation)
        if orientation == self._orientation:
            return
        self._orientation = orientation
        self._buffers.invalidate()
        self._pointer = None
        if self.volume is not None:
            self.auto_fit()

    @property
    def slice_navigators(self) -> bool:
        return self._slice_navigators

    @slice_navigators.setter
    def slice_navigators(self, value):
        self._slice_navigators = bool(value)

    @property
    def normalized_scale(self) -> float:
        """The zoom factor of the camera, i.e. screen pixels per world unit."""
        return normalized_scale(self._camera.view)

    @property
    def quarter_turns(self) -> int:
        """The number of clockwise quarter turns applied to the image."""
        return self._quarter_turns

    @property
    def flip_row_sign(self) -> int:
        """1, or -1 if the image is flipped vertically."""
        return self._flip_rows

    @property
    def flip_column_sign(self) -> int:
        """1, or -1 if the image is flipped horizontally."""
        return self._flip_columns

    @property
    def pointer(self):
        """The last point picked by the slice navigators, or None."""
        return self._pointer

    @pointer.setter
    def pointer(self, pointer):
        if pointer is not None:
            assert_type("pointer", pointer, Pointer)
        self._pointer = pointer

    @property
    def volume(self):
        """The volume that is shown (the first registered volume), or None."""
        for obj in self._core.objects:
            if isinstance(obj, Volume):
                return obj
        return None

    @property
    def current_slice(self):
        """The slice that is shown, or None."""
        volume = self.volume
        if volume is None:
            return None
        axis = self._orientation.index
        return volume.children[axis].get(volume.indices[axis])

    @property
    def slice_width(self) -> int:
        """The width in pixels of the current slice, or 0."""
        current = self.current_slice
        return 0 if current is None else current.width

    @property
    def slice_height(self) -> int:
        """The height in pixels of the current slice, or 0."""
        current = self.current_slice
        return 0 if current is None else current.height

    # %% Objects

    def add(self, obj):
        """Register a display object, and prepare it for display."""
        self._core.objects.add(obj)
        self.update(obj)

    def update(self, obj):
        """Refresh a display object, e.g. after its data finished loading.

        Only volumes are displayed. A volume (or its labelmap) that is
        still dirty is deferred until a later update. On its first
        successful update, the zoom is fitted to the slice.
        """
        if obj not in self._core.objects:
            self._core.objects.add(obj)
        if not isinstance(obj, Volume):
            logger.debug(f"{self.__class__.__name__} ignores {obj!r}")
            return
        if obj.dirty or (obj.labelmap is not None and obj.labelmap.dirty):
            logger.debug(f"Deferring {obj!r} until its data is loaded.")
            return
        if obj is not self.volume:
            return

        self._buffers.invalidate()
        if obj.id not in self._initialized:
            self._initialized.add(obj.id)
            self.auto_fit()

    def remove(self, obj):
        """Unregister a display object."""
        was_shown = obj is self.volume
        if self._core.objects.remove(obj):
            self._initialized.discard(obj.id)
        if was_shown:
            self._buffers.invalidate()
            self._pointer = None

    def get(self, id):
        """Get a registered display object by its id, or None."""
        return self._core.objects.get(id)

    # %% View state

    def auto_fit(self):
        """Set the camera zoom so that the slice fits the viewport."""
        current = self.current_slice
        if current is None:
            return
        geometry = SliceGeometry.from_slice(current, self._orientation)
        pw, ph = geometry.physical_size
        if self._quarter_turns % 2:
            pw, ph = ph, pw
        if pw <= 0 or ph <= 0:
            return
        self._camera.zoom = min(self.width / pw, self.height / ph)

    def resize(self, width, height):
        """Resize the canvas, and fit the slice to it."""
        self._core.resize(width, height)
        self.auto_fit()

    def reset_view(self):
        """Reset pan and zoom, and reset the window to the full data range."""
        self._camera.reset()
        self.auto_fit()
        volume = self.volume
        if volume is not None:
            volume.window_low = volume.min
            volume.window_high = volume.max
            volume.modified()

    def rotate_quarter_turn(self):
        """Rotate the image by a quarter turn clockwise."""
        self._quarter_turns = (self._quarter_turns + 1) % 4
        self._reset_camera()

    def flip_rows(self):
        """Flip the image vertically. Flipping twice restores it."""
        self._flip_rows *= -1
        self._reset_camera()

    def flip_columns(self):
        """Flip the image horizontally. Flipping twice restores it."""
        self._flip_columns *= -1
        self._reset_camera()

    def _reset_camera(self):
        self._camera.reset()
        self.auto_fit()

    # %% Interaction

    def scroll(self, up=True):
        """Move the cursor of the current orientation by one slice."""
        volume = self.volume
        if volume is None:
            return
        index = volume.get_index(self._orientation) + (1 if up else -1)
        volume.set_index(self._orientation, index)
        volume.modified()
        self.handle_event(
            ScrollEvent(
                "scroll",
                target=self,
                orientation=self._orientation,
                index=volume.get_index(self._orientation),
            )
        )

    def window_level(self, window_delta, level_delta):
        """Adjust the window/level of the volume, relative to its current state."""
        volume = self.volume
        if volume is None:
            return
        low, high = adjust_window_level(volume, window_delta, level_delta)
        volume.modified()
        self.handle_event(
            WindowLevelEvent(
                "window_level", target=self, window_low=low, window_high=high
            )
        )

    def _view_args(self):
        view = self._camera.view
        return (
            (self.width, self.height),
            self.normalized_scale,
            (float(view[12]), float(view[13])),
        )

    def _view_state(self):
        return {
            "quarter_turns": self._quarter_turns,
            "flip_rows": self._flip_rows,
            "flip_columns": self._flip_columns,
        }

    def _pick(self, x, y):
        volume = self.volume
        if volume is None:
            return None
        return pick_slice(
            volume, self._orientation, x, y, *self._view_args(), **self._view_state()
        )

    def xy2ijk(self, x, y):
        """Pick a screen point on the shown slice.

        Returns a ``PickResult`` with the slice index along each stack,
        the voxel index and the world coordinate, or None if the point
        is not on the slice.
        """
        picked = self._pick(x, y)
        return None if picked is None else picked[0]

    # %% Rendering

    def render(self):
        """Render one frame."""
        if not len(self._core.objects):
            return
        volume = self.volume
        if volume is None:
            return
        if volume.dirty or (volume.labelmap is not None and volume.labelmap.dirty):
            logger.debug("Volume not loaded yet, skipping render.")
            return

        context = self._context
        if not volume.visible:
            context.clear()
            return

        axis = self._orientation.index
        stack = volume.children[axis]
        index = volume.indices[axis]
        current = stack.get(index)
        if current is None:
            logger.debug(f"No slice {index} along {self._orientation.value}, skipping render.")
            return

        self._buffers.refresh(volume, stack, index)
        render_buffers(
            context,
            self._buffers,
            current,
            self._orientation,
            self._camera.view,
            labelmap=volume.labelmap,
            **self._view_state(),
        )

        if self._slice_navigators:
            self._draw_slice_navigators(volume)

        pointer = self._pointer
        if pointer is not None:
            if (
                pointer.orientation != self._orientation
                or pointer.slice_index != volume.indices[axis]
            ):
                self._pointer = None
            else:
                self._draw_pointer(current, pointer)

    def _draw_slice_navigators(self, volume):
        interactor = self._interactor
        if not (
            interactor.mouse_inside
            and interactor.shift_down
            and not interactor.left_button_down
        ):
            return

        x, y = interactor.mouse_position
        picked = self._pick(x, y)
        if picked is not None:
            result, pixel = picked
            for orientation, index in zip(Orientation, result.axis_indices):
                volume.set_index(orientation, index)
            volume.modified()
            self.handle_event(
                SliceNavigationEvent(
                    "slice_navigation",
                    target=self,
                    indices=volume.indices,
                    pick=result,
                )
            )
            self._pointer = Pointer(
                pixel,
                result.slice_indices,
                result.world,
                self._orientation,
                volume.indices[self._orientation.index],
            )
        self.handle_event(Event("point", target=self))

    def _draw_pointer(self, current, pointer):
        geometry = SliceGeometry.from_slice(current, self._orientation)
        viewport_size, scale, pan = self._view_args()
        x, y = pixel_to_screen(geometry, *pointer.pixel, viewport_size, scale, pan)
        x, y = decanonicalize_point(
            x, y, self._orientation, viewport_size, scale, pan, **self._view_state()
        )
        draw_pointer(self._context, x, y)

    def snapshot(self):
        """Get a copy of the rendered frame, as a (height, width, 4) uint8 array."""
        return self._core.canvas.snapshot()
