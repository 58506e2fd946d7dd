"""Display objects and events.

The objects are the volume, its labelmap, and the stacks of slices
through it. The events are dispatched by event targets, and include
the pointer, wheel and keyboard input, plus window/level and slice
navigation.
"""

# ruff: noqa: F401

from ._base import DisplayObject, id_provider
from ._events import (
    Event,
    EventTarget,
    EventType,
    PointerEvent,
    KeyboardEvent,
    WheelEvent,
    WindowEvent,
    ScrollEvent,
    WindowLevelEvent,
    SliceNavigationEvent,
)
from ._slice import Slice, SliceStack
from ._volume import Volume, Labelmap, AxisInfo, SHOW_ALL
