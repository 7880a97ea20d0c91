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

from dataclasses import dataclass, field
from math import inf, isfinite
from typing import Tuple

from pywhitted.geometry import Point
from pywhitted.misc import EPSILON
from pywhitted.ray import Ray
from pywhitted.transformations import Transformation


def check_axis(origin: float, direction: float, minimum: float, maximum: float) -> Tuple[float, float]:
    """Return the values of `t` where a ray enters and leaves the slab `minimum ≤ x ≤ maximum`

    The two values are sorted. If the ray is parallel to the slab, the result is (-∞, +∞) when
    the origin lies within the slab and (+∞, +∞) or (-∞, -∞) when it does not."""
    if abs(direction) >= EPSILON:
        tmin = (minimum - origin) / direction
        tmax = (maximum - origin) / direction
    else:
        tmin = -inf if origin >= minimum else inf
        tmax = inf if origin <= maximum else -inf

    if tmin > tmax:
        tmin, tmax = tmax, tmin

    return tmin, tmax


def _empty_min():
    return Point(inf, inf, inf)


def _empty_max():
    return Point(-inf, -inf, -inf)


@dataclass
class BoundingBox:
    """An axis-aligned box

    The default box is empty: its minimum is (+∞, +∞, +∞) and its maximum is (-∞, -∞, -∞), so that
    :meth:`.add_point` and :meth:`.add_box` can be used to grow it starting from nothing."""

    minimum: Point = field(default_factory=_empty_min)
    maximum: Point = field(default_factory=_empty_max)

    def is_empty(self):
        return (self.minimum.x > self.maximum.x or
                self.minimum.y > self.maximum.y or
                self.minimum.z > self.maximum.z)

    def is_finite(self):
        """Return True if the box is not empty and does not extend to infinity"""
        return not self.is_empty() and all(isfinite(x) for x in (*self.minimum, *self.maximum))

    def add_point(self, point: Point):
        """Enlarge the box so that it contains `point`"""
        self.minimum = self.minimum.lower(point)
        self.maximum = self.maximum.upper(point)

    def add_box(self, other: "BoundingBox"):
        """Enlarge the box so that it contains `other`"""
        if other.is_empty():
            return

        self.add_point(other.minimum)
        self.add_point(other.maximum)

    def contains_point(self, point: Point):
        return (self.minimum.x <= point.x <= self.maximum.x and
                self.minimum.y <= point.y <= self.maximum.y and
                self.minimum.z <= point.z <= self.maximum.z)

    def contains_box(self, other: "BoundingBox"):
        return self.contains_point(other.minimum) and self.contains_point(other.maximum)

    def corners(self):
        """Return the eight vertices of the box"""
        return [Point(x, y, z)
                for x in (self.minimum.x, self.maximum.x)
                for y in (self.minimum.y, self.maximum.y)
                for z in (self.minimum.z, self.maximum.z)]

    def transform(self, transformation: Transformation) -> "BoundingBox":
        """Return the axis-aligned box enclosing this box after it has been transformed

        Unless `transformation` is made only of translations and scalings, the result is larger than
        the transformed box. Boxes extending to infinity along some axis (e.g., the one of a plane)
        become infinite along every axis."""
        if self.is_empty():
            return BoundingBox()

        if not self.is_finite():
            return BoundingBox(minimum=Point(-inf, -inf, -inf), maximum=Point(inf, inf, inf))

        result = BoundingBox()
        for corner in self.corners():
            result.add_point(transformation * corner)

        return result

    def intersects(self, ray: Ray) -> bool:
        """Return True if the ray (or its extension backwards) crosses the box"""
        xtmin, xtmax = check_axis(ray.origin.x, ray.dir.x, self.minimum.x, self.maximum.x)
        ytmin, ytmax = check_axis(ray.origin.y, ray.dir.y, self.minimum.y, self.maximum.y)
        ztmin, ztmax = check_axis(ray.origin.z, ray.dir.z, self.minimum.z, self.maximum.z)

        return max(xtmin, ytmin, ztmin) <= min(xtmax, ytmax, ztmax)

    def split(self) -> Tuple["BoundingBox", "BoundingBox"]:
        """Cut the box in two halves along its longest axis

        If two axes have the same length, X wins over Y and Y wins over Z."""
        dx = self.maximum.x - self.minimum.x
        dy = self.maximum.y - self.minimum.y
        dz = self.maximum.z - self.minimum.z
        greatest = max(dx, dy, dz)

        x0, y0, z0 = self.minimum.x, self.minimum.y, self.minimum.z
        x1, y1, z1 = self.maximum.x, self.maximum.y, self.maximum.z

        if greatest == dx:
            x0 = x1 = x0 + dx / 2.0
        elif greatest == dy:
            y0 = y1 = y0 + dy / 2.0
        else:
            z0 = z1 = z0 + dz / 2.0

        left = BoundingBox(minimum=self.minimum, maximum=Point(x1, y1, z1))
        right = BoundingBox(minimum=Point(x0, y0, z0), maximum=self.maximum)
        return left, right
