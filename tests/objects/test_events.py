from sliceview.objects import (
    Event,
    EventTarget,
    EventType,
    PointerEvent,
    WheelEvent,
    ScrollEvent,
)
from sliceview.objects import Volume


def test_event_target():
    c = EventTarget()

    # It's event handling mechanism should be fully functional
    events = []

    def handler(event):
        events.append(event.value)

    def event_with_val(type, value):
        ev = Event(type)
        ev.value = value
        return ev

    c.add_event_handler(handler, "foo", "bar")
    c.add_event_handler(handler, "bar")
    c.handle_event(event_with_val(type="foo", value=1))
    c.handle_event(event_with_val(type="bar", value=2))
    c.handle_event(event_with_val(type="spam", value=3))
    c.remove_event_handler(handler, "foo")
    c.handle_event(event_with_val(type="foo", value=4))
    c.handle_event(event_with_val(type="bar", value=5))
    c.handle_event(event_with_val(type="spam", value=6))
    c.remove_event_handler(handler, "bar")
    c.handle_event(event_with_val(type="foo", value=7))
    c.handle_event(event_with_val(type="bar", value=8))
    c.handle_event(event_with_val(type="spam", value=9))

    assert events == [1, 2, 5]


def test_event_handler_decorator():
    c = EventTarget()
    indices = []

    @c.add_event_handler("scroll")
    def handler(event):
        indices.append(event.index)

    c.handle_event(ScrollEvent("scroll", orientation="Z", index=3))
    c.handle_event(ScrollEvent(EventType.SCROLL, orientation="Z", index=4))
    assert indices == [3, 4]


def test_event_handler_order_and_cancel():
    c = EventTarget()
    calls = []

    def first(event):
        calls.append("first")
        event.cancel()

    def second(event):
        calls.append("second")

    c.add_event_handler(first, "pointer_down")
    c.add_event_handler(second, "pointer_down")
    c.handle_event(PointerEvent("pointer_down", x=1, y=2, button=1))
    assert calls == ["first"]


def test_failing_handler_does_not_stop_others():
    c = EventTarget()
    calls = []

    def bad(event):
        raise RuntimeError("handler failure in test")

    def good(event):
        calls.append(event.dy)

    c.add_event_handler(bad, "wheel")
    c.add_event_handler(good, "wheel")
    c.handle_event(WheelEvent("wheel", x=0, y=0, dx=0, dy=-1))
    assert calls == [-1]


def test_event_attributes():
    ev = PointerEvent("pointer_move", x=3, y=4, modifiers=("Shift",))
    assert ev.type == "pointer_move"
    assert ev.x == 3 and ev.y == 4
    assert ev.button == 0
    assert ev.buttons == ()
    assert ev.modifiers == ("Shift",)
    assert ev.time_stamp > 0
    assert not ev.cancelled

    # Enum members are normalized to their string value
    assert Event(EventType.WINDOW_LEVEL).type == "window_level"


def test_volume_modified_event():
    volume = Volume()
    targets = []
    volume.add_event_handler(lambda e: targets.append(e.target), "modified")
    volume.modified()
    assert targets == [volume]
