from ..utils import logger


class Interactor:
    """Tracks pointer and keyboard state, and turns gestures into renderer actions.

    The slice renderer reads the state of its interactor (whether the
    mouse is inside, whether shift is held, which buttons are down, and
    the last pointer position) to draw its overlays. In addition the
    interactor translates gestures:

    * wheel: scroll through the slices.
    * right drag: adjust window/level.
    * middle drag: pan the camera.

    Parameters
    ----------
    enabled : bool
        Whether the interactor responds to events. Default True.
    auto_render : bool
        Whether to call ``renderer.render()`` after each event that
        changed something. Default True.

    Usage
    -----

    An interactor is connected to a renderer with ``connect()``, which
    makes it listen to the events of the renderer's canvas. GUI
    integrations emit pointer/key/wheel events on the canvas. Events
    can also be fed directly into ``handle_event()``.
    """

    WINDOW_LEVEL_GAIN = 5.0

    def __init__(self, *, enabled=True, auto_render=True):
        self.enabled = enabled
        self.auto_render = auto_render
        self._renderer = None

        self.mouse_inside = False
        self.shift_down = False
        self.left_button_down = False
        self.right_button_down = False
        self.middle_button_down = False
        self.mouse_position = (0.0, 0.0)

    @property
    def renderer(self):
        """The renderer that this interactor is connected to, or None."""
        return self._renderer

    def connect(self, renderer):
        """Connect to a renderer and listen to the events of its canvas."""
        self._renderer = renderer
        renderer.canvas.add_event_handler(
            self.handle_event,
            "pointer_down",
            "pointer_move",
            "pointer_up",
            "pointer_enter",
            "pointer_leave",
            "wheel",
            "key_down",
            "key_up",
            "resize",
        )

    def handle_event(self, event):
        if not self.enabled:
            return

        type = event.type
        changed = False

        if type.startswith(("pointer_", "wheel")):
            self.shift_down = "Shift" in event.modifiers

        if type == "pointer_enter":
            self.mouse_inside = True
            changed = True
        elif type == "pointer_leave":
            self.mouse_inside = False
            self.left_button_down = self.right_button_down = False
            self.middle_button_down = False
            changed = True
        elif type == "pointer_down":
            self._set_button(event.button, True)
            self.mouse_position = (event.x, event.y)
        elif type == "pointer_up":
            self._set_button(event.button, False)
            self.mouse_position = (event.x, event.y)
            changed = True
        elif type == "pointer_move":
            self.mouse_inside = True
            dx = event.x - self.mouse_position[0]
            dy = event.y - self.mouse_position[1]
            self.mouse_position = (event.x, event.y)
            changed = self._drag(dx, dy) or self.shift_down
        elif type == "wheel":
            if self._renderer is not None and event.dy:
                self._renderer.scroll(event.dy < 0)
                changed = True
        elif type == "key_down":
            if event.key == "Shift":
                self.shift_down = True
                changed = True
        elif type == "key_up":
            if event.key == "Shift":
                self.shift_down = False
                changed = True
        elif type == "resize":
            if self._renderer is not None:
                self._renderer.resize(event.width, event.height)
                changed = True

        if changed and self.auto_render and self._renderer is not None:
            self._renderer.render()

    def _set_button(self, button, down):
        # Buttons follow the jupyter_rfb convention
        if button == 1:
            self.left_button_down = down
        elif button == 2:
            self.right_button_down = down
        elif button == 3:
            self.middle_button_down = down

    def _drag(self, dx, dy):
        renderer = self._renderer
        if renderer is None or (dx == 0 and dy == 0):
            return False
        if self.right_button_down:
            width, height = renderer.width, renderer.height
            renderer.window_level(
                dx / width * self.WINDOW_LEVEL_GAIN,
                -dy / height * self.WINDOW_LEVEL_GAIN,
            )
            return True
        elif self.middle_button_down:
            scale = max(renderer.normalized_scale, 1e-4)
            renderer.camera.pan(dx / scale, -dy / scale)
            logger.debug(f"Panned by ({dx}, {dy}) px")
            return True
        return False
