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

from typing import Callable, List, Optional

from pywhitted.colors import Color, WHITE
from pywhitted.geometry import Point, Vec
from pywhitted.pcg import PCG

# A function telling whether `point` (first argument) cannot see `light_position` (second argument)
ShadowTest = Callable[[Point, Point], bool]


class PointLight:
    """A point light

    This class holds information about a point light (a Dirac's delta in space). The class has
    the following fields:

    -   `position`: a :class:`Point` object holding the position of the point light in 3D space
    -   `intensity`: the color of the point light (an instance of :class:`.Color`)"""

    def __init__(self, position: Point, intensity: Color = WHITE):
        self.position = position
        self.intensity = intensity

    @property
    def samples(self) -> List[Point]:
        return [self.position]

    def shadow_intensity(self, point: Point, is_shadowed: ShadowTest, pcg: Optional[PCG] = None) -> float:
        """Return 1 if `point` is in the shadow of some object, 0 otherwise"""
        return 1.0 if is_shadowed(point, self.position) else 0.0


class AreaLight:
    """A rectangular light producing soft shadows

    The rectangle starts at `corner` and spans the two vectors `full_uvec` and `full_vvec`. It is
    divided in a grid of `usteps × vsteps` cells; each cell contributes one sample to the lighting
    of a point and one (jittered) sample to the computation of its shadow.

    Jittering needs random numbers, which are drawn from `pcg` unless a generator is explicitly
    passed to :meth:`.shadow_intensity`."""

    def __init__(self, corner: Point, full_uvec: Vec, usteps: int, full_vvec: Vec, vsteps: int,
                 intensity: Color = WHITE, pcg: Optional[PCG] = None):
        assert usteps > 0 and vsteps > 0, "an area light needs at least one cell"

        self.corner = corner
        self.uvec = full_uvec * (1.0 / usteps)
        self.usteps = usteps
        self.vvec = full_vvec * (1.0 / vsteps)
        self.vsteps = vsteps
        self.intensity = intensity
        self.pcg = pcg if pcg else PCG()

        # Lighting uses the center of every cell, so these never change
        self._samples = [self.point_on_light(u, v, 0.5, 0.5)
                         for v in range(vsteps)
                         for u in range(usteps)]

    @property
    def sample_count(self):
        return self.usteps * self.vsteps

    @property
    def samples(self) -> List[Point]:
        return self._samples

    @property
    def position(self) -> Point:
        """The center of the light"""
        return self.corner + self.uvec * (self.usteps / 2) + self.vvec * (self.vsteps / 2)

    def point_on_light(self, u: int, v: int, u_offset: float, v_offset: float) -> Point:
        """Return the point at (`u_offset`, `v_offset`) within the cell (`u`, `v`)

        Offsets are in [0, 1]; 0.5 is the center of the cell."""
        return self.corner + self.uvec * (u + u_offset) + self.vvec * (v + v_offset)

    def shadow_intensity(self, point: Point, is_shadowed: ShadowTest, pcg: Optional[PCG] = None) -> float:
        """Return the fraction of the light that cannot be seen from `point`

        One random point is picked within each cell of the grid, and the result is the fraction
        of them that are hidden by some object."""
        if not pcg:
            pcg = self.pcg

        visible = 0
        for v in range(self.vsteps):
            for u in range(self.usteps):
                sample = self.point_on_light(u, v, pcg.random_float(), pcg.random_float())
                if not is_shadowed(point, sample):
                    visible += 1

        return 1.0 - visible / self.sample_count
