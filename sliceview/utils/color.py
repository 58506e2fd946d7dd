"""Provides utilities to deal with color.

Slices are composited in 8-bit RGBA, so next to the float representation
the Color class knows how to convert to and from byte quadruplets.
"""

import ctypes
import colorsys

F4 = ctypes.c_float * 4


def _float_from_css_value(v, i, is_hue=False):
    v = v.strip()
    if is_hue:
        # Hue can be in degrees or a raw number between 0 and 1
        if i == 0:
            return float(v[:-3]) / 360 if v.endswith("deg") else float(v)
        return float(v[:-1]) / 100 if v.endswith("%") else float(v)
    if v.endswith("%"):
        return float(v[:-1]) / 100
    elif i < 3:
        return float(v) / 255
    return float(v)


class Color:
    """A representation of color (in the sRGB colorspace).

    Internally the color is stored using 4 32-bit floats (rgba). It can be
    instantiated in a variety of ways:

        * `Color(r, g, b, a)` or `Color((r, g, b))`, values between 0 and 1.
        * `Color(gray)` or `Color(gray, a)`.
        * `Color("red")` for a small set of named colors.
        * `Color("#ff0000")`, `Color("#ff0000ff")`, `Color("#f00")`.
        * `Color("rgb(255, 0, 0)")`, `Color("rgba(255,0,0,.3)")`.
        * `Color("hsv(120deg, 100%, 50%)")`, `Color("hsl(0.333, 1, 0.5)")`.

    Parameters
    ----------
    args : tuple, int, str
        The color specification.

    """

    __slots__ = ["_val"]

    def __init__(self, *args):
        if len(args) == 1:
            color = args[0]
            if isinstance(color, (int, float)):
                self._set_from_tuple(args)
            elif isinstance(color, str):
                self._set_from_str(color)
            else:
                # Assume it's an iterable,
                # may raise TypeError 'object is not iterable'
                self._set_from_tuple(color)
        else:
            self._set_from_tuple(args)

    def __repr__(self):
        f = lambda v: f"{v:0.4f}".rstrip("0").ljust(3, "0")  # noqa: E731
        return f"Color({f(self.r)}, {f(self.g)}, {f(self.b)}, {f(self.a)})"

    def __len__(self):
        return 4

    def __getitem__(self, index):
        return self._val[index]

    def __iter__(self):
        return self.rgba.__iter__()

    def __eq__(self, other):
        if not isinstance(other, Color):
            other = Color(other)
        return all(self._val[i] == other._val[i] for i in range(4))

    def _set_from_rgba(self, r, g, b, a):
        a = max(0.0, min(1.0, float(a)))
        self._val = F4(float(r), float(g), float(b), a)

    def _set_from_tuple(self, color):
        color = tuple(float(c) for c in color)
        if len(color) == 4:
            self._set_from_rgba(*color)
        elif len(color) == 3:
            self._set_from_rgba(*color, 1)
        elif len(color) == 2:
            self._set_from_rgba(color[0], color[0], color[0], color[1])
        elif len(color) == 1:
            self._set_from_rgba(color[0], color[0], color[0], 1)
        else:
            raise ValueError(f"Cannot parse color tuple with {len(color)} values")

    def _set_from_str(self, color):
        color = color.lower().replace(" ", "")
        if color.startswith("#"):
            hexchars = color[1:]
            if len(hexchars) in (3, 4):
                values = [int(c, 16) / 15 for c in hexchars]
            elif len(hexchars) in (6, 8):
                values = [
                    int(hexchars[i : i + 2], 16) / 255
                    for i in range(0, len(hexchars), 2)
                ]
            else:
                raise ValueError(
                    f"Expecting 4, 5, 7, or 9 chars in a hex number, got {len(color)}."
                )
            self._set_from_tuple(values)
        elif color.startswith(("rgb(", "rgba(")):
            parts = color.split("(")[1].split(")")[0].split(",")
            parts = [_float_from_css_value(p, i) for i, p in enumerate(parts)]
            if len(parts) not in (3, 4):
                raise ValueError(
                    f"CSS color {color.split('(')[0]}(..) must have 3 or 4 elements, not {len(parts)}"
                )
            self._set_from_tuple(parts)
        elif color.startswith(("hsl(", "hsla(", "hsv(", "hsva(")):
            parts = color.split("(")[1].split(")")[0].split(",")
            parts = [
                _float_from_css_value(p, i, is_hue=True) for i, p in enumerate(parts)
            ]
            if len(parts) not in (3, 4):
                raise ValueError(
                    f"CSS color {color.split('(')[0]}(..) must have 3 or 4 elements, not {len(parts)}"
                )
            if color.startswith("hsl"):
                other = Color.from_hsl(*parts)
            else:
                other = Color.from_hsv(*parts)
            self._set_from_rgba(*other.rgba)
        else:
            try:
                hexcolor = NAMED_COLORS[color]
            except KeyError:
                raise ValueError(f"Unknown color: '{color}'") from None
            self._set_from_str(hexcolor)

    @property
    def rgba(self):
        """The RGBA tuple (values between 0 and 1)."""
        return self._val[0], self._val[1], self._val[2], self._val[3]

    @property
    def rgb(self):
        """The RGB tuple (values between 0 and 1)."""
        return self._val[0], self._val[1], self._val[2]

    @property
    def r(self):
        """The red value."""
        return self._val[0]

    @property
    def g(self):
        """The green value."""
        return self._val[1]

    @property
    def b(self):
        """The blue value."""
        return self._val[2]

    @property
    def a(self):
        """The alpha (transparency) value, between 0 and 1."""
        return self._val[3]

    @property
    def hex(self):
        """The CSS hex string, e.g. "#00ff00". The alpha channel is ignored."""
        r, g, b, _ = self.to_bytes()
        return f"#{r:02x}{g:02x}{b:02x}"

    @property
    def css(self):
        """The CSS color string, e.g. "rgba(0,255,0,0.5)"."""
        r, g, b, _ = self.to_bytes()
        if self.a == 1:
            return f"rgb({r},{g},{b})"
        return f"rgba({r},{g},{b},{self.a:0.3f})"

    def clip(self):
        """Return a new Color with the values clipped between 0 and 1."""
        return Color(max(0.0, min(1.0, x)) for x in self.rgba)

    def to_bytes(self):
        """Get the color as 4 ints between 0 and 255 (values are clipped)."""
        return tuple(int(v * 255 + 0.5) for v in self.clip().rgba)

    @classmethod
    def from_bytes(cls, r, g, b, a=255):
        """Create a Color from byte values (0-255)."""
        return cls(r / 255, g / 255, b / 255, a / 255)

    @classmethod
    def from_hsv(cls, hue, saturation, value, alpha=1):
        """Create a Color object from a color in the HSV colorspace.

        The hue goes from red (0) to green (0.333) to blue (0.666) and
        back to red (1).
        """
        return cls(*colorsys.hsv_to_rgb(hue, saturation, value), alpha)

    @classmethod
    def from_hsl(cls, hue, saturation, lightness, alpha=1):
        """Create a Color object from a color in the HSL colorspace."""
        return cls(*colorsys.hls_to_rgb(hue, lightness, saturation), alpha)

    def lerp(self, target, t):
        """Linear interpolate from this color towards target color with factor t in RGBA space."""
        target = target if isinstance(target, Color) else Color(target)
        return Color(v1 + (v2 - v1) * t for v1, v2 in zip(self.rgba, target.rgba))


NAMED_COLORS = {
    "black": "#000000",
    "white": "#FFFFFF",
    "gray": "#808080",
    "red": "#FF0000",
    "green": "#008000",
    "lime": "#00FF00",
    "blue": "#0000FF",
    "yellow": "#FFFF00",
    "cyan": "#00FFFF",
    "magenta": "#FF00FF",
    "orange": "#FFA500",
    "r": "#FF0000",
    "g": "#00FF00",
    "b": "#0000FF",
    "c": "#00FFFF",
    "m": "#FF00FF",
    "y": "#FFFF00",
    "k": "#000000",
    "w": "#FFFFFF",
}
