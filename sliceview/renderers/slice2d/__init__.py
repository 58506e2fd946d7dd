"""
A CPU renderer that draws one orthogonal slice of a volume, with numpy.

The work is split over a few modules:

* ``_buffers``: turns slice data into RGBA image and label buffers, with caching.
* ``_mapping``: maps between screen, pixel, voxel and world coordinates.
* ``_compositor``: draws the buffers and overlays with the view transform.
* ``_windowlevel``: the relative window/level control law.
* ``_renderer``: the ``SliceRenderer`` that ties these together.

"""

# flake8: noqa

from ._renderer import SliceRenderer, Pointer
from ._buffers import SliceBuffers
from ._mapping import PickResult, SliceGeometry, project_to_axes
from ._windowlevel import adjust_window_level
