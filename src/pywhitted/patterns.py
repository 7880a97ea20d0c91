# -*- encoding: utf-8 -*-
#
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

from math import floor, sqrt, atan2, acos, pi
from typing import Callable

from pywhitted.colors import Color, average
from pywhitted.geometry import Point, Vec2d
from pywhitted.transformations import Transformation


class Pattern:
    """A procedural texture, i.e., a function associating a color with each point in space

    This is an abstract class, and you should only use it to derive concrete classes. Be sure
    to redefine the method :meth:`.Pattern.color_at`, which receives points in the pattern space.
    """

    def __init__(self, transformation: Transformation = Transformation()):
        self.transformation = transformation

    def color_at(self, point: Point) -> Color:
        """Return the color of the pattern at a point in pattern space"""
        raise NotImplementedError("Pattern.color_at is an abstract method and cannot be called directly")

    def color_at_shape(self, shape, world_point: Point) -> Color:
        """Return the color of the pattern at a point in world space lying on `shape`

        The point is first moved to the space of the shape (taking into account all the groups
        it belongs to), then to the space of the pattern."""
        object_point = shape.world_to_object(world_point)
        pattern_point = self.transformation.inverse() * object_point
        return self.color_at(pattern_point)


class SolidPattern(Pattern):
    """A pattern with the same color everywhere"""

    def __init__(self, color: Color, transformation: Transformation = Transformation()):
        super().__init__(transformation)
        self.color = color

    def color_at(self, point: Point) -> Color:
        return self.color


class StripePattern(Pattern):
    """Stripes alternating along the X axis, one unit wide"""

    def __init__(self, color_a: Color, color_b: Color, transformation: Transformation = Transformation()):
        super().__init__(transformation)
        self.color_a = color_a
        self.color_b = color_b

    def color_at(self, point: Point) -> Color:
        return self.color_a if floor(point.x) % 2 == 0 else self.color_b


class GradientPattern(Pattern):
    """A linear blend from `color_a` to `color_b`, repeating every unit along the X axis"""

    def __init__(self, color_a: Color, color_b: Color, transformation: Transformation = Transformation()):
        super().__init__(transformation)
        self.color_a = color_a
        self.color_b = color_b

    def color_at(self, point: Point) -> Color:
        fraction = point.x - floor(point.x)
        return self.color_a.blend(self.color_b, fraction)


class RingPattern(Pattern):
    """Concentric rings around the Y axis"""

    def __init__(self, color_a: Color, color_b: Color, transformation: Transformation = Transformation()):
        super().__init__(transformation)
        self.color_a = color_a
        self.color_b = color_b

    def color_at(self, point: Point) -> Color:
        return self.color_a if floor(sqrt(point.x ** 2 + point.z ** 2)) % 2 == 0 else self.color_b


class CheckersPattern(Pattern):
    """A 3D checkerboard made of unit cubes"""

    def __init__(self, color_a: Color, color_b: Color, transformation: Transformation = Transformation()):
        super().__init__(transformation)
        self.color_a = color_a
        self.color_b = color_b

    def color_at(self, point: Point) -> Color:
        if (floor(point.x) + floor(point.y) + floor(point.z)) % 2 == 0:
            return self.color_a

        return self.color_b


class BlendedPattern(Pattern):
    """The average of two patterns, each evaluated in its own space"""

    def __init__(self, pattern_a: Pattern, pattern_b: Pattern, transformation: Transformation = Transformation()):
        super().__init__(transformation)
        self.pattern_a = pattern_a
        self.pattern_b = pattern_b

    def color_at(self, point: Point) -> Color:
        color_a = self.pattern_a.color_at(self.pattern_a.transformation.inverse() * point)
        color_b = self.pattern_b.color_at(self.pattern_b.transformation.inverse() * point)
        return average((color_a, color_b))


########################################################################################
# UV patterns and texture mapping


class UVPattern:
    """A 2D texture, associating a color with each (u, v) point in [0, 1]²"""

    def color_at(self, uv: Vec2d) -> Color:
        raise NotImplementedError("UVPattern.color_at is an abstract method and cannot be called directly")


class UVCheckers(UVPattern):
    """A checkerboard with `width × height` squares"""

    def __init__(self, width: int, height: int, color_a: Color, color_b: Color):
        self.width = width
        self.height = height
        self.color_a = color_a
        self.color_b = color_b

    def color_at(self, uv: Vec2d) -> Color:
        u2 = floor(uv.u * self.width)
        v2 = floor(uv.v * self.height)
        return self.color_a if (u2 + v2) % 2 == 0 else self.color_b


class UVAlignCheck(UVPattern):
    """A texture with a different color at each of its four corners

    It is meant to check how textures are oriented on the faces of a shape."""

    def __init__(self, main: Color, upper_left: Color, upper_right: Color, bottom_left: Color,
                 bottom_right: Color):
        self.main = main
        self.upper_left = upper_left
        self.upper_right = upper_right
        self.bottom_left = bottom_left
        self.bottom_right = bottom_right

    def color_at(self, uv: Vec2d) -> Color:
        if uv.v > 0.8:
            if uv.u < 0.2:
                return self.upper_left
            if uv.u > 0.8:
                return self.upper_right
        elif uv.v < 0.2:
            if uv.u < 0.2:
                return self.bottom_left
            if uv.u > 0.8:
                return self.bottom_right

        return self.main


class UVImage(UVPattern):
    """A texture read from an image

    The parameter `canvas` must be a :class:`.Canvas` object; the point (0, 0) is its bottom-left corner."""

    def __init__(self, canvas):
        self.canvas = canvas

    def color_at(self, uv: Vec2d) -> Color:
        # Round half up, so that texel centers are picked consistently
        x = int(floor(uv.u * (self.canvas.width - 1) + 0.5))
        y = int(floor((1.0 - uv.v) * (self.canvas.height - 1) + 0.5))
        return self.canvas.get_pixel(x, y)


def spherical_map(point: Point) -> Vec2d:
    """Map a point on the unit sphere into (u, v) coordinates

    `u` grows counterclockwise when looking down the Y axis, with the seam on the -Z axis."""
    raw_u = atan2(point.x, point.z) / (2 * pi)
    radius = sqrt(point.x ** 2 + point.y ** 2 + point.z ** 2)
    phi = acos(point.y / radius)
    return Vec2d(u=1 - (raw_u + 0.5), v=1 - phi / pi)


def planar_map(point: Point) -> Vec2d:
    """Map a point on the XZ plane into (u, v) coordinates, repeating every unit"""
    return Vec2d(u=point.x % 1.0, v=point.z % 1.0)


def cylindrical_map(point: Point) -> Vec2d:
    """Map a point on the unit cylinder into (u, v) coordinates, repeating every unit along Y"""
    raw_u = atan2(point.x, point.z) / (2 * pi)
    return Vec2d(u=1 - (raw_u + 0.5), v=point.y % 1.0)


class TextureMapPattern(Pattern):
    """Wrap a :class:`.UVPattern` around a shape using a mapping function

    `mapping` is one among :func:`.spherical_map`, :func:`.planar_map`, and :func:`.cylindrical_map`."""

    def __init__(self, uv_pattern: UVPattern, mapping: Callable[[Point], Vec2d],
                 transformation: Transformation = Transformation()):
        super().__init__(transformation)
        self.uv_pattern = uv_pattern
        self.mapping = mapping

    def color_at(self, point: Point) -> Color:
        return self.uv_pattern.color_at(self.mapping(point))


CUBE_FACES = ["left", "front", "right", "back", "up", "down"]


def face_from_point(point: Point) -> str:
    """Return the name of the face of the unit cube where `point` lies"""
    coord = max(abs(point.x), abs(point.y), abs(point.z))

    if coord == point.x:
        return "right"
    elif coord == -point.x:
        return "left"
    elif coord == point.y:
        return "up"
    elif coord == -point.y:
        return "down"
    elif coord == point.z:
        return "front"

    return "back"


# For each face, the two functions computing the unnormalized (u, v) coordinates
_CUBE_UV = {
    "front": (lambda p: p.x + 1, lambda p: p.y + 1),
    "back": (lambda p: 1 - p.x, lambda p: p.y + 1),
    "left": (lambda p: p.z + 1, lambda p: p.y + 1),
    "right": (lambda p: 1 - p.z, lambda p: p.y + 1),
    "up": (lambda p: p.x + 1, lambda p: 1 - p.z),
    "down": (lambda p: p.x + 1, lambda p: p.z + 1),
}


def cube_uv(face: str, point: Point) -> Vec2d:
    """Map a point on a face of the unit cube into (u, v) coordinates"""
    raw_u, raw_v = _CUBE_UV[face]
    return Vec2d(u=(raw_u(point) % 2.0) / 2.0, v=(raw_v(point) % 2.0) / 2.0)


class CubeMapPattern(Pattern):
    """Six UV patterns, one for each face of the unit cube"""

    def __init__(self, left: UVPattern, front: UVPattern, right: UVPattern, back: UVPattern,
                 up: UVPattern, down: UVPattern, transformation: Transformation = Transformation()):
        super().__init__(transformation)
        self.faces = {
            "left": left,
            "front": front,
            "right": right,
            "back": back,
            "up": up,
            "down": down,
        }

    def color_at(self, point: Point) -> Color:
        face = face_from_point(point)
        return self.faces[face].color_at(cube_uv(face, point))
