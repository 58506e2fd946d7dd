from ..canvases import Canvas
from ..objects import DisplayObject
from ..utils import logger, assert_type


class Renderer:
    """Base (abstract) renderer class that all renderers inherit from."""

    def render(self):
        """The method to call to render a frame."""
        raise NotImplementedError()


class ObjectRegistry:
    """Storage for the display objects known to a renderer, keyed by id.

    Objects are kept in the order in which they were added.
    """

    def __init__(self):
        self._store = {}

    def __len__(self):
        return len(self._store)

    def __iter__(self):
        return iter(list(self._store.values()))

    def __contains__(self, obj):
        return isinstance(obj, DisplayObject) and self._store.get(obj.id) is obj

    def add(self, obj):
        """Add an object. Returns True if it was not registered yet."""
        assert_type("obj", obj, DisplayObject)
        if obj in self:
            return False
        self._store[obj.id] = obj
        return True

    def remove(self, obj):
        """Remove an object. Returns True if it was registered."""
        if obj not in self:
            return False
        del self._store[obj.id]
        return True

    def get(self, id):
        """Get an object by its id, or None."""
        return self._store.get(id)

    def clear(self):
        self._store.clear()


class RendererCore:
    """Infrastructure that renderers share: the target canvas, its size,
    and the registry of display objects.

    Renderers hold an instance of this class (rather than subclassing it)
    and call into it explicitly.

    Parameters
    ----------
    target : Canvas | tuple
        The canvas to render to, or a (width, height) tuple to create one.

    """

    def __init__(self, target):
        if isinstance(target, Canvas):
            self._canvas = target
        else:
            try:
                width, height = target
            except (TypeError, ValueError):
                raise TypeError(
                    f"Renderer target must be a Canvas or (width, height), not {target!r}"
                ) from None
            self._canvas = Canvas(width, height)
        self.objects = ObjectRegistry()

    @property
    def canvas(self) -> Canvas:
        return self._canvas

    @property
    def width(self) -> int:
        return self._canvas.width

    @property
    def height(self) -> int:
        return self._canvas.height

    def resize(self, width, height):
        """Resize the target canvas."""
        self._canvas.resize(width, height)
        logger.debug(f"Renderer resized to {self.width}x{self.height}")
