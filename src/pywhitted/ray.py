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

from __future__ import annotations

from dataclasses import dataclass, field

from pywhitted.geometry import Point, Vec
from pywhitted.misc import EPSILON
from pywhitted.transformations import Transformation


@dataclass
class Ray:
    """A half-line starting at `origin` and running along `dir`

    `dir` needs not be normalized: rays brought into the local space of a shape usually are not,
    and the parameter `t` of an intersection is always measured in units of ``len(dir)``."""

    origin: Point = field(default_factory=Point)
    dir: Vec = field(default_factory=Vec)

    @classmethod
    def towards(cls, origin: Point, target: Point) -> Ray:
        """Return the ray leaving `origin` with unit direction pointing to `target`"""
        return cls(origin=origin, dir=(target - origin).normalize())

    def at(self, t: float) -> Point:
        return self.origin + self.dir * t

    def transform(self, transformation: Transformation) -> Ray:
        """Return the ray as seen after applying `transformation` to both origin and direction"""
        return Ray(transformation * self.origin, transformation * self.dir)

    def is_close(self, other: Ray, epsilon=EPSILON):
        return self.origin.is_close(other.origin, epsilon=epsilon) and self.dir.is_close(other.dir, epsilon=epsilon)
