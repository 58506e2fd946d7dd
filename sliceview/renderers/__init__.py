"""
The purpose of a renderer is to draw display objects to a canvas. It
also provides picking: mapping a point on the canvas back to the data.

The renderers are ``Renderer`` (the base class) and ``SliceRenderer``.

A renderer is directly associated with its target canvas and can only
render to that target. Several renderers (e.g. one per orientation) can
show the same volume; the volume holds the shared state (cursors and
window/level), and each renderer re-reads that state on every frame.

A renderer provides a ``.render()`` method that draws one frame. The
slice renderer keeps two off-screen buffers (image and labels) that are
only recomputed when the state they depend on changed::

                         ____________
                        |  buffers   |
    [volume] -------->  | image/label| -- render() --> [canvas]
                        |____________|

"""

# flake8: noqa

from ._base import Renderer, RendererCore, ObjectRegistry
from .slice2d import SliceRenderer, Pointer, PickResult
