# The MIT License (MIT)
#
# Copyright © 2021 Maurizio Tomasi
#
# Permission is hereby granted, free of charge, to any person obtaining a copy of this software and associated
# documentation files (the “Software”), to deal in the Software without restriction, including without limitation the
# rights to use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all copies or substantial portions of
# the Software. THE SOFTWARE IS PROVIDED “AS IS”, WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT
# LIMITED TO THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT
# SHALL THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF
# CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.


from dataclasses import dataclass
from math import floor
from typing import Iterable, Tuple

from pywhitted.misc import are_close, EPSILON


def _to_byte(x: float) -> int:
    return max(0, min(255, int(floor(x * 255 + 0.5))))


@dataclass
class Color:
    """
    A RGB color

    The class has three floating-point members: `r` (red), `g` (green), and `b` (blue). Values are
    not clamped: a bright light can produce components larger than 1, and clamping only happens when
    the color is converted with :meth:`.Color.to_rgb8`.
    """
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    def __add__(self, other):
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __sub__(self, other):
        return Color(self.r - other.r, self.g - other.g, self.b - other.b)

    def __mul__(self, other):
        """Multiply two colors component by component (the light filtered by a surface), or scale a color"""
        if isinstance(other, Color):
            return Color(self.r * other.r, self.g * other.g, self.b * other.b)

        return Color(self.r * other, self.g * other, self.b * other)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return Color(self.r / scalar, self.g / scalar, self.b / scalar)

    def blend(self, other, fraction: float):
        """Return the color at `fraction` along the way from this color to `other`

        A `fraction` of 0 returns this color, 1 returns `other`."""
        return self + (other - self) * fraction

    def luminosity(self):
        """Return a rough measure of the luminosity associated with the color"""
        return (max(self.r, self.g, self.b) + min(self.r, self.g, self.b)) / 2

    def to_rgb8(self, gamma: float = 1.0) -> Tuple[int, int, int]:
        """Convert the color into three integers in [0, 255], as used by 8-bit image formats

        Each component is raised to `1 / gamma`, scaled and rounded; values outside [0, 1] are clamped."""
        if gamma == 1.0:
            return _to_byte(self.r), _to_byte(self.g), _to_byte(self.b)

        return tuple(_to_byte(max(0.0, x) ** (1 / gamma)) for x in (self.r, self.g, self.b))

    def is_close(self, other, epsilon=EPSILON):
        """Return True if the three RGB components of two colors are close by less than `epsilon`"""
        return (are_close(self.r, other.r, epsilon=epsilon) and
                are_close(self.g, other.g, epsilon=epsilon) and
                are_close(self.b, other.b, epsilon=epsilon))


def average(colors: Iterable[Color]) -> Color:
    """Return the mean of a non-empty sequence of colors"""
    colors = list(colors)
    assert colors, "cannot average an empty list of colors"

    total = Color()
    for color in colors:
        total += color

    return total / len(colors)


BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
