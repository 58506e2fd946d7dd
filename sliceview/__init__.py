"""Render orthogonal slices of 3D volumes, with numpy."""

# ruff: noqa: F401, F403

from ._version import __version__, version_info
from . import utils

from .objects import *
from .cameras import *
from .controllers import *
from .canvases import *
from .renderers import *

from .utils.color import Color
from .utils.export import save_image
from .utils import enums, logger
from .utils.enums import *

# Temp fix for pyinstaller to pick up pylinalg
import pylinalg

del pylinalg
