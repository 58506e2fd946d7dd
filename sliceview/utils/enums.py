"""
The enums used in sliceview. The enums are all available from the root ``sliceview`` namespace.
"""

from enum import Enum


__all__ = ["Orientation", "InvalidOrientation"]


class InvalidOrientation(ValueError):
    """Raised when an orientation name is not one of x/y/z, sagittal, coronal or axial."""


class Orientation(str, Enum):
    """The Orientation enum specifies the axis that a slice is perpendicular to.

    Each orientation selects one of the three orthogonal slice stacks of a
    volume, and the volume cursor that indexes into it.
    """

    X = "X"  #: Sagittal, perpendicular to the world X axis (stack 0).
    Y = "Y"  #: Coronal, perpendicular to the world Y axis (stack 1).
    Z = "Z"  #: Axial, perpendicular to the world Z axis (stack 2).

    @property
    def index(self) -> int:
        """The index of the slice stack (and volume cursor) for this orientation."""
        return "XYZ".index(self.value)

    @property
    def anatomical_name(self) -> str:
        return _ANATOMICAL_NAMES[self.value]

    @classmethod
    def from_name(cls, name) -> "Orientation":
        """Get the orientation from an axis letter or an anatomical name.

        Accepts 'x', 'y', 'z', 'sagittal', 'coronal' and 'axial' (case
        insensitive), or an Orientation instance.
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise InvalidOrientation(f"Invalid orientation: {name!r}")
        key = name.strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidOrientation(f"Invalid orientation: {name!r}") from None


_ALIASES = {"SAGITTAL": "X", "CORONAL": "Y", "AXIAL": "Z"}
_ANATOMICAL_NAMES = {"X": "sagittal", "Y": "coronal", "Z": "axial"}
