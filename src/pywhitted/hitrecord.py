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

from dataclasses import dataclass
from math import sqrt
from typing import List, Optional, Tuple

from pywhitted.geometry import Point, Vec, Normal
from pywhitted.intersection import Intersection
from pywhitted.misc import EPSILON
from pywhitted.ray import Ray


@dataclass
class HitRecord:
    """
    A class holding everything needed to shade the point where a ray hit a surface

    The parameters defined in this dataclass are the following:

    -   `t`: the ray parameter where the hit happened
    -   `shape`: the (leaf) shape that was hit
    -   `world_point`: a :class:`.Point` object holding the world coordinates of the hit point
    -   `eye`: a :class:`.Vec` pointing from the hit point back to the origin of the ray
    -   `normal`: a :class:`.Normal` object holding the normal to the surface, always facing `eye`
    -   `is_inside`: True if the ray hit the surface from the inside (the normal has been flipped)
    -   `over_point`, `under_point`: `world_point` slightly moved along and against the normal.
        They are used as the origins of shadow/reflected rays and of refracted rays respectively.
    -   `reflect_dir`: the direction of the ray after a mirror reflection
    -   `n1`, `n2`: the refractive indices of the media before and after the surface
    -   `ray`: the ray that hit the surface
    """
    t: float
    shape: "Shape"
    world_point: Point
    eye: Vec
    normal: Normal
    is_inside: bool
    over_point: Point
    under_point: Point
    reflect_dir: Vec
    n1: float
    n2: float
    ray: Ray

    def schlick(self) -> float:
        """Return the fraction of light reflected by the surface, using Schlick's approximation

        The result is 1 in case of total internal reflection."""
        cos = self.eye.dot(self.normal)

        if self.n1 > self.n2:
            n = self.n1 / self.n2
            sin2_t = n * n * (1.0 - cos * cos)
            if sin2_t > 1.0:
                return 1.0

            # With n1 > n2, use the cosine of the transmitted ray
            cos = sqrt(1.0 - sin2_t)

        r0 = ((self.n1 - self.n2) / (self.n1 + self.n2)) ** 2
        return r0 + (1.0 - r0) * (1.0 - cos) ** 5


def refractive_indices(hit: Intersection, intersections: List[Intersection]) -> Tuple[float, float]:
    """Return the refractive indices (n1, n2) at both sides of the surface hit by a ray

    The function replays `intersections` (sorted by `t`), keeping track of the shapes the
    ray is inside of. Outside any shape, the refractive index is 1."""
    containers = []
    n1, n2 = 1.0, 1.0

    for intersection in intersections:
        if intersection == hit:
            n1 = containers[-1].material.refractive_index if containers else 1.0

        for idx, shape in enumerate(containers):
            if shape is intersection.shape:
                del containers[idx]
                break
        else:
            containers.append(intersection.shape)

        if intersection == hit:
            n2 = containers[-1].material.refractive_index if containers else 1.0
            break

    return n1, n2


def prepare_hit(hit: Intersection, ray: Ray, intersections: Optional[List[Intersection]] = None) -> HitRecord:
    """Build the :class:`.HitRecord` for the intersection `hit` of `ray`

    The list `intersections` holds all the intersections of the ray, sorted by `t`, and is
    used to determine the refractive indices; if it is not provided, only `hit` is used."""
    if intersections is None:
        intersections = [hit]

    world_point = ray.at(hit.t)
    eye = -ray.dir
    normal = hit.shape.normal_at(world_point, hit)

    is_inside = normal.dot(eye) < 0.0
    if is_inside:
        normal = -normal

    offset = normal.to_vec() * EPSILON
    n1, n2 = refractive_indices(hit, intersections)

    return HitRecord(
        t=hit.t,
        shape=hit.shape,
        world_point=world_point,
        eye=eye,
        normal=normal,
        is_inside=is_inside,
        over_point=world_point + offset,
        under_point=world_point - offset,
        reflect_dir=ray.dir.reflect(normal),
        n1=n1,
        n2=n2,
        ray=ray,
    )
