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

import math
import operator
from dataclasses import dataclass

from pywhitted.misc import are_close, EPSILON


@dataclass
class _Triple:
    """Storage and comparison shared by :class:`Vec`, :class:`Point`, and :class:`Normal`

    The three types are kept distinct so that transformations can treat them differently
    (points are translated, vectors are not, normals use the inverse transpose)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, item):
        """Return the i-th component, starting from 0"""
        assert 0 <= item < 3, f"wrong index {item} for a {type(self).__name__}"
        return (self.x, self.y, self.z)[item]

    def is_close(self, other, epsilon=EPSILON):
        """Return True if all the components of the object and `other` differ by less than `epsilon`"""
        assert isinstance(other, type(self)), f"cannot compare a {type(self).__name__} with a {type(other).__name__}"
        return all(are_close(a, b, epsilon=epsilon) for a, b in zip(self, other))

    def _combine(self, other, op, result_type):
        return result_type(op(self.x, other.x), op(self.y, other.y), op(self.z, other.z))

    def _scaled(self, factor):
        return type(self)(self.x * factor, self.y * factor, self.z * factor)

    def dot(self, other):
        """Compute the dot product; `other` can be a `Vec` or a `Normal`"""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def squared_norm(self):
        return self.dot(self)

    def norm(self):
        return math.sqrt(self.squared_norm())

    def normalize(self):
        """Return an object of the same type pointing in the same direction, with unit length"""
        return self._scaled(1.0 / self.norm())

    def to_vec(self):
        return Vec(self.x, self.y, self.z)


def _unsupported(op, a, b):
    return TypeError(f"unsupported operation {op} between a {type(a).__name__} and a {type(b).__name__}")


@dataclass
class Vec(_Triple):
    """A 3D vector

    Vectors represent directions and displacements: a transformation rotates and scales them,
    but does not translate them."""

    def __add__(self, other):
        if isinstance(other, (Vec, Point)):
            return self._combine(other, operator.add, type(other))

        raise _unsupported("+", self, other)

    def __sub__(self, other):
        if isinstance(other, Vec):
            return self._combine(other, operator.sub, Vec)

        raise _unsupported("-", self, other)

    def __mul__(self, scalar):
        return self._scaled(scalar)

    __rmul__ = __mul__

    def __neg__(self):
        return self._scaled(-1.0)

    def cross(self, other):
        """Compute the cross product between two vectors"""
        return Vec(x=self.y * other.z - self.z * other.y,
                   y=self.z * other.x - self.x * other.z,
                   z=self.x * other.y - self.y * other.x)

    def reflect(self, normal):
        """Reflect the vector around a normal

        The normal must be normalized. The result is `v - 2 (v·n) n`."""
        n = normal.to_vec()
        return self - n * (2.0 * self.dot(n))


@dataclass
class Point(_Triple):
    """A position in 3D space"""

    def __add__(self, other):
        if isinstance(other, Vec):
            return self._combine(other, operator.add, Point)

        raise _unsupported("+", self, other)

    def __sub__(self, other):
        """Subtract a vector (giving a `Point`) or another point (giving the `Vec` between them)"""
        if isinstance(other, Vec):
            return self._combine(other, operator.sub, Point)
        elif isinstance(other, Point):
            return self._combine(other, operator.sub, Vec)

        raise _unsupported("-", self, other)

    def distance(self, other: "Point") -> float:
        return (self - other).norm()

    def lower(self, other: "Point") -> "Point":
        """Return the point whose coordinates are the smallest of `self` and `other`, axis by axis"""
        return self._combine(other, min, Point)

    def upper(self, other: "Point") -> "Point":
        """Return the point whose coordinates are the largest of `self` and `other`, axis by axis"""
        return self._combine(other, max, Point)


@dataclass
class Normal(_Triple):
    """A surface normal

    Normals are transformed with the transpose of the inverse matrix, so that they stay
    perpendicular to the surface after a non-uniform scaling."""

    def __neg__(self):
        return self._scaled(-1.0)

    def __add__(self, other):
        if isinstance(other, Normal):
            return self._combine(other, operator.add, Normal)

        raise _unsupported("+", self, other)

    def __mul__(self, scalar):
        return self._scaled(scalar)

    __rmul__ = __mul__


VEC_X = Vec(1.0, 0.0, 0.0)
VEC_Y = Vec(0.0, 1.0, 0.0)
VEC_Z = Vec(0.0, 0.0, 1.0)

ORIGIN = Point(0.0, 0.0, 0.0)


@dataclass
class Vec2d:
    """A 2D vector used to represent a point on a surface

    The fields are named `u` and `v` to distinguish them from the usual 3D coordinates `x`, `y`, `z`.
    Triangles store the barycentric coordinates of a hit in a `Vec2d`; texture maps use it for
    the (u, v) coordinates of a point on a shape."""
    u: float = 0.0
    v: float = 0.0

    def is_close(self, other: "Vec2d", epsilon=EPSILON):
        """Check whether two `Vec2d` points are roughly the same or not"""
        return (abs(self.u - other.u) < epsilon) and (abs(self.v - other.v) < epsilon)
