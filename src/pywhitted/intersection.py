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

from typing import List, Optional

from pywhitted.geometry import Vec2d


class Intersection:
    """A point where a ray crosses the surface of a shape

    The class has the following members:

    -   `t`: the ray parameter where the intersection happens
    -   `shape`: the (leaf) shape that was hit
    -   `uv`: optional per-shape data. Triangles store here the barycentric coordinates
        of the hit, which are later used to interpolate normals.

    Two intersections are equal if they have the same `t` and refer to the very same shape;
    `uv` is not taken into account."""

    __slots__ = ("t", "shape", "uv")

    def __init__(self, t: float, shape, uv: Optional[Vec2d] = None):
        self.t = t
        self.shape = shape
        self.uv = uv

    def __eq__(self, other):
        if not isinstance(other, Intersection):
            return NotImplemented

        return self.t == other.t and self.shape is other.shape

    def __hash__(self):
        return hash((self.t, id(self.shape)))

    def __repr__(self):
        return f"Intersection(t={self.t}, shape={type(self.shape).__name__}, uv={self.uv})"


def sort_intersections(intersections: List[Intersection]) -> List[Intersection]:
    """Return the intersections sorted by increasing `t`; ties keep their original order"""
    return sorted(intersections, key=lambda x: x.t)


def find_hit(intersections: List[Intersection]) -> Optional[Intersection]:
    """Return the visible intersection, i.e., the one with the smallest non-negative `t`

    Intersections behind the origin of the ray are ignored. If there is no such
    intersection, return ``None``."""
    hit = None
    for intersection in intersections:
        if intersection.t < 0.0:
            continue

        if (hit is None) or (intersection.t < hit.t):
            hit = intersection

    return hit
