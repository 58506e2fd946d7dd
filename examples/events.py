"""
Example showing how a GUI would drive a slice renderer with events.

Pointer, wheel and key events are emitted on the canvas, where the
renderer's interactor picks them up. Holding shift while hovering
moves all slice cursors to the point under the mouse.
"""

import numpy as np
import sliceview
from sliceview.objects import KeyboardEvent, PointerEvent, WheelEvent


data = np.random.uniform(0, 255, (40, 50, 30))
volume = sliceview.Volume.from_numpy(data)

renderer = sliceview.SliceRenderer(
    (200, 200), orientation="z", slice_navigators=True
)
renderer.add(volume)


@renderer.add_event_handler("scroll")
def on_scroll(event):
    print(f"Scrolled to slice {event.index} along {event.orientation.value}")


@renderer.add_event_handler("window_level")
def on_window_level(event):
    print(f"Window is now [{event.window_low:.1f}, {event.window_high:.1f}]")


@renderer.add_event_handler("slice_navigation")
def on_slice_navigation(event):
    print("Cursors moved to", event.indices)


canvas = renderer.canvas
canvas.handle_event(PointerEvent("pointer_enter", x=100, y=100))

# Scroll up twice
for _ in range(2):
    canvas.handle_event(WheelEvent("wheel", x=100, y=100, dx=0, dy=-1))

# Drag with the right button to widen the window
canvas.handle_event(PointerEvent("pointer_down", x=100, y=100, button=2))
canvas.handle_event(PointerEvent("pointer_move", x=140, y=100, buttons=(2,)))
canvas.handle_event(PointerEvent("pointer_up", x=140, y=100, button=2))

# Hover with shift pressed
canvas.handle_event(KeyboardEvent("key_down", key="Shift"))
canvas.handle_event(
    PointerEvent("pointer_move", x=60, y=80, modifiers=("Shift",))
)
canvas.handle_event(KeyboardEvent("key_up", key="Shift"))

print("Pointer:", renderer.pointer)
