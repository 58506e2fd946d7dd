from collections import defaultdict
from enum import Enum
from time import perf_counter
from typing import Union

from ..utils import log_exception


class EventType(str, Enum):
    # Keyboard
    KEY_DOWN = "key_down"
    KEY_UP = "key_up"
    # Pointer
    POINTER_DOWN = "pointer_down"
    POINTER_MOVE = "pointer_move"
    POINTER_UP = "pointer_up"
    POINTER_ENTER = "pointer_enter"
    POINTER_LEAVE = "pointer_leave"
    # Wheel
    WHEEL = "wheel"
    # Window
    RESIZE = "resize"
    # Emitted by renderers and volumes
    SCROLL = "scroll"
    WINDOW_LEVEL = "window_level"
    SLICE_NAVIGATION = "slice_navigation"
    POINT = "point"
    MODIFIED = "modified"


class Event:
    """Event base class.

    Parameters
    ----------
    type : Union[str, EventType]
        The name of the event.
    target : EventTarget
        The object that emitted the event.
    time_stamp : float
        The time at which the event was created (in seconds). Might not be an actual
        time stamp so please only use this for relative time measurements.
    cancelled : bool
        A boolean value indicating whether the event is cancelled.

    """

    def __init__(
        self,
        type: Union[str, EventType],
        *,
        target: "EventTarget" = None,
        time_stamp: float = None,
        cancelled: bool = False,
    ):
        self._type = EventType(type).value if type in _EVENT_TYPES else type
        self._time_stamp = time_stamp or perf_counter()
        self._target = target
        self._cancelled = cancelled

    @property
    def type(self) -> str:
        """A string representing the name of the event."""
        return self._type

    @property
    def time_stamp(self) -> float:
        """The time at which the event was created (in seconds)."""
        return self._time_stamp

    @property
    def target(self) -> "EventTarget":
        """The object that emitted the event."""
        return self._target

    @property
    def cancelled(self) -> bool:
        """A boolean value indicating whether the event is cancelled."""
        return self._cancelled

    def cancel(self):
        """Cancels the event, remaining handlers are not called."""
        self._cancelled = True


_EVENT_TYPES = set(EventType) | {t.value for t in EventType}


class KeyboardEvent(Event):
    """Keyboard button press.

    Parameters
    ----------
    args : Any
        Positional arguments are forwarded to the :class:`base class
        <sliceview.objects.Event>`.
    key : str
        The key that was pressed.
    modifiers : tuple
        The modifiers that were pressed while the key was pressed.
    kwargs : Any
        Additional keyword arguments are forward to the :class:`base class
        <sliceview.objects.Event>`.

    """

    def __init__(self, *args, key, modifiers=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.key = key
        self.modifiers = modifiers or ()


class PointerEvent(Event):
    """Mouse/Touch Event.

    Parameters
    ----------
    args : Any
        Positional arguments are forwarded to the :class:`base class
        <sliceview.objects.Event>`.
    x : float
        The x position of the cursor in canvas space (px).
    y : float
        Thy y position of the cursor in canvas space (px).
    button : int
        The integer value of the button being pushed (1 left, 2 right, 3 middle).
    buttons : tuple
        The buttons being held.
    modifiers : tuple
        The modifiers that were pressed, e.g. ("Shift", ).
    kwargs : Any
        Additional keyword arguments are forward to the :class:`base class
        <sliceview.objects.Event>`.

    Notes
    -----
    The values of this event follow the convention used by jupyter rfb.

    """

    def __init__(
        self, *args, x, y, button=0, buttons=None, modifiers=None, **kwargs
    ):
        super().__init__(*args, **kwargs)
        self.x = x
        self.y = y
        self.button = button
        self.buttons = buttons or ()
        self.modifiers = modifiers or ()


class WheelEvent(PointerEvent):
    """Scrolling of the mouse wheel.

    Parameters
    ----------
    dx : float
        The horizontal scroll delta.
    dy : float
        The vertical scroll delta. Negative values scroll up.

    """

    def __init__(self, *args, dx, dy, **kwargs):
        super().__init__(*args, **kwargs)
        self.dx = dx
        self.dy = dy


class WindowEvent(Event):
    """Canvas resize event.

    Parameters
    ----------
    width : int
        The new width of the canvas (px).
    height : int
        The new height of the canvas (px).

    """

    def __init__(self, *args, width=None, height=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.width = width
        self.height = height


class ScrollEvent(Event):
    """Emitted by a slice renderer after its volume cursor moved by scrolling.

    Parameters
    ----------
    orientation : Orientation
        The orientation of the renderer that scrolled.
    index : int
        The new slice index along that orientation.

    """

    def __init__(self, *args, orientation, index, **kwargs):
        super().__init__(*args, **kwargs)
        self.orientation = orientation
        self.index = index


class WindowLevelEvent(Event):
    """Emitted after the display window of a volume was adjusted.

    Parameters
    ----------
    window_low : float
        The new lower bound of the display window.
    window_high : float
        The new upper bound of the display window.

    """

    def __init__(self, *args, window_low, window_high, **kwargs):
        super().__init__(*args, **kwargs)
        self.window_low = window_low
        self.window_high = window_high


class SliceNavigationEvent(Event):
    """Emitted when picking moved all three volume cursors.

    Parameters
    ----------
    indices : tuple
        The new (x, y, z) cursor values.
    pick : PickResult
        The picking result that the cursors were derived from.

    """

    def __init__(self, *args, indices, pick=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.indices = indices
        self.pick = pick


class EventTarget:
    """Targetable object mixin.

    Mixin class that enables event handlers to be attached to objects
    of the mixed-in class.

    Parameters
    ----------
    args : Any
        Arguments are forwarded to allow multiple inheritance.
    kwargs : Any
        Kwargs are forwarded to allow multiple inheritance.

    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._event_handlers = defaultdict(list)

    def add_event_handler(self, *args):
        """Register an event handler.

        Arguments:
            callback (callable): The event handler. Must accept a
                single event argument.
            *types (list of strings): A list of event types.

        Can also be used as a decorator.

        Example:

        .. code-block:: py

            def my_handler(event):
                print(event.index)

            renderer.add_event_handler(my_handler, "scroll")

        Decorator usage example:

        .. code-block:: py

            @renderer.add_event_handler("window_level")
            def my_handler(event):
                print(event.window_low, event.window_high)
        """

        decorating = not callable(args[0])
        callback = None if decorating else args[0]
        types = args if decorating else args[1:]

        if not types:
            raise ValueError("No types registered for callback")
        if not all(isinstance(t, str) for t in types):
            raise TypeError("All types must be string.")

        def decorator(_callback):
            for type in types:
                type = EventType(type).value if type in _EVENT_TYPES else type
                if _callback not in self._event_handlers[type]:
                    self._event_handlers[type].append(_callback)
            return _callback

        if decorating:
            return decorator
        return decorator(callback)

    def remove_event_handler(self, callback, *types):
        """Unregister an event handler.

        Arguments:
            callback (callable): The event handler.
            *types (list of strings): A list of event types.
        """
        for type in types:
            type = EventType(type).value if type in _EVENT_TYPES else type
            self._event_handlers[type].remove(callback)

    def handle_event(self, event: Event):
        """Handle an incoming event.

        Handlers are called in the order in which they were registered.
        An exception in a handler is logged and does not stop the others.

        Arguments:
            event: The event to handle
        """
        event_type = event.type
        for callback in list(self._event_handlers[event_type]):
            if event.cancelled:
                break
            with log_exception(f"Error during handling {event_type} event"):
                callback(event)
