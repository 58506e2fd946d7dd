from __future__ import annotations

import random
import weakref
import threading

from ._events import EventTarget, Event


class IdProvider:
    """Object for internal use to manage display object id's."""

    def __init__(self):
        self._ids_in_use = set([0])
        self._map = weakref.WeakValueDictionary()
        self._lock = threading.RLock()

    def claim_id(self, obj: DisplayObject) -> int:
        """Used by display objects to claim an id."""
        # We don't simply count up, but keep a pool of ids, so that
        # an application that creates and discards many volumes (e.g.
        # while browsing a series) can re-use them.
        id_max = 1_048_575  # 2*20-1
        max_items = 1_000_000

        with self._lock:
            if len(self._ids_in_use) >= max_items:
                raise RuntimeError("Max number of objects reached.")
            id = 0
            while id in self._ids_in_use:
                id = random.randint(1, id_max)
            self._ids_in_use.add(id)
            self._map[id] = obj

        return id

    def release_id(self, obj: DisplayObject, id: int) -> None:
        """Release an id associated with an object."""
        if id > 0:
            with self._lock:
                self._ids_in_use.discard(id)
                self._map.pop(id, None)

    def get_object_from_id(self, id: int) -> DisplayObject | None:
        """Return the object associated with an id, or None."""
        return self._map.get(id)


id_provider = IdProvider()


class DisplayObject(EventTarget):
    """Base class for objects that a renderer can display.

    Display objects are produced by a loader (or built in memory), and
    then handed to a renderer with ``renderer.add()``. While the data is
    still being loaded, the ``dirty`` flag is set, and renderers defer
    processing until it is cleared.

    Parameters
    ----------
    visible : bool
        Whether the object is visible.
    name : str
        The name of the object.

    """

    _id = 0

    def __init__(self, *, visible=True, name=""):
        super().__init__()
        self._id = id_provider.claim_id(self)
        self.visible = visible
        self.name = name
        self.dirty = False

    def __repr__(self):
        return f"<sliceview.{self.__class__.__name__} {self.name} at {hex(id(self))}>"

    def __del__(self):
        id_provider.release_id(self, self._id)

    @property
    def id(self) -> int:
        """An integer id smaller than 2**31 (read-only)."""
        return self._id

    @property
    def visible(self) -> bool:
        """Whether is object is rendered or not. Default True."""
        return self._visible

    @visible.setter
    def visible(self, visible: bool) -> None:
        self._visible = bool(visible)

    @property
    def dirty(self) -> bool:
        """Whether the data of this object is still being loaded."""
        return self._dirty

    @dirty.setter
    def dirty(self, dirty: bool) -> None:
        self._dirty = bool(dirty)

    def modified(self):
        """Notify observers (e.g. other renderers or UI widgets) that this
        object's state was changed.
        """
        self.handle_event(Event("modified", target=self))
