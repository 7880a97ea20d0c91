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
from math import sqrt
from typing import List, Optional, Union

from pywhitted.colors import Color, BLACK
from pywhitted.geometry import Point, Vec
from pywhitted.hitrecord import HitRecord, prepare_hit
from pywhitted.intersection import Intersection, find_hit, sort_intersections
from pywhitted.lights import PointLight, AreaLight
from pywhitted.materials import Material
from pywhitted.pcg import PCG
from pywhitted.ray import Ray
from pywhitted.shapes import Shape, Sphere
from pywhitted.transformations import scaling


@dataclass(frozen=True)
class RenderSettings:
    """Parameters of the shading algorithm

    -   `max_depth`: the maximum number of reflected/refracted rays traced one after the other
    -   `background`: the color returned when a ray does not hit anything"""
    max_depth: int = 5
    background: Color = field(default_factory=lambda: Color(0.0, 0.0, 0.0))


class World:
    """A class holding a list of shapes and a light, which make a «world»

    You can add shapes to a world using :meth:`.World.add_shape`. Typically, you call
    :meth:`.World.color_at` to compute the color seen along a ray. A world is also a callable
    object, so that it can be passed directly to :meth:`.ImageTracer.fire_all_rays`.
    """

    shapes: List[Shape]
    light: Union[PointLight, AreaLight, None]

    def __init__(self, shapes: Optional[List[Shape]] = None, light: Union[PointLight, AreaLight, None] = None,
                 settings: RenderSettings = RenderSettings()):
        self.shapes = list(shapes) if shapes else []
        self.light = light
        self.settings = settings

    def add_shape(self, shape: Shape):
        """Append a new shape to this world"""
        self.shapes.append(shape)

    def intersect(self, ray: Ray) -> List[Intersection]:
        """Return all the intersections between the ray and the shapes, sorted by `t`"""
        result = []
        for shape in self.shapes:
            result.extend(shape.intersect(ray))

        return sort_intersections(result)

    def is_shadowed(self, point: Point, light_position: Point) -> bool:
        """Return True if some shape casting shadows lies between `point` and `light_position`"""
        ray = Ray.towards(point, light_position)
        intersections = [x for x in self.intersect(ray) if x.shape.blocks_light()]
        hit = find_hit(intersections)

        return (hit is not None) and (hit.t < point.distance(light_position))

    def shade_hit(self, comps: HitRecord, depth: int = 0, pcg: Optional[PCG] = None) -> Color:
        """Compute the color at the point described by `comps`

        The result includes the light coming directly from the light source and, if `depth`
        is below the limit, the light that was reflected and refracted by the surface."""
        material = comps.shape.material
        shadow_intensity = self.light.shadow_intensity(comps.over_point, self.is_shadowed, pcg)
        surface = material.lighting(
            shape=comps.shape,
            light=self.light,
            point=comps.over_point,
            eye=comps.eye,
            normal=comps.normal,
            shadow_intensity=shadow_intensity,
        )

        if depth >= self.settings.max_depth:
            return surface

        reflected = self.reflected_color(comps, depth, pcg)
        refracted = self.refracted_color(comps, depth, pcg)

        if material.reflective > 0.0 and material.transparency > 0.0:
            reflectance = comps.schlick()
            return surface + reflected * reflectance + refracted * (1.0 - reflectance)

        return surface + reflected + refracted

    def reflected_color(self, comps: HitRecord, depth: int = 0, pcg: Optional[PCG] = None) -> Color:
        """Return the color seen along the direction of mirror reflection"""
        reflective = comps.shape.material.reflective
        if reflective <= 0.0 or depth >= self.settings.max_depth:
            return BLACK

        reflect_ray = Ray(origin=comps.over_point, dir=comps.reflect_dir)
        return self.color_at(reflect_ray, depth + 1, pcg) * reflective

    def refracted_color(self, comps: HitRecord, depth: int = 0, pcg: Optional[PCG] = None) -> Color:
        """Return the color seen through a transparent surface, following Snell's law

        In case of total internal reflection the result is black."""
        transparency = comps.shape.material.transparency
        if transparency <= 0.0 or depth >= self.settings.max_depth:
            return BLACK

        n_ratio = comps.n1 / comps.n2
        normal = comps.normal.to_vec()
        cos_i = comps.eye.dot(normal)
        sin2_t = n_ratio * n_ratio * (1.0 - cos_i * cos_i)
        if sin2_t > 1.0:
            return BLACK

        cos_t = sqrt(1.0 - sin2_t)
        direction = normal * (n_ratio * cos_i - cos_t) - comps.eye * n_ratio
        refract_ray = Ray(origin=comps.under_point, dir=direction)
        return self.color_at(refract_ray, depth + 1, pcg) * transparency

    def color_at(self, ray: Ray, depth: int = 0, pcg: Optional[PCG] = None) -> Color:
        """Compute the color seen along `ray`

        `depth` counts how many reflections/refractions the ray has already gone through; `pcg`
        is the generator used by area lights (if ``None``, the light uses its own)."""
        if not self.light:
            return BLACK

        intersections = self.intersect(ray)
        hit = find_hit(intersections)
        if hit is None:
            return self.settings.background

        comps = prepare_hit(hit, ray, intersections)
        return self.shade_hit(comps, depth, pcg)

    def __call__(self, ray: Ray, pcg: Optional[PCG] = None) -> Color:
        return self.color_at(ray, pcg=pcg)


def default_world(settings: RenderSettings = RenderSettings()) -> World:
    """Return a world with two concentric spheres and a white point light

    The outer sphere has unit radius; the inner one has radius 0.5."""
    outer = Sphere(material=Material(color=Color(0.8, 1.0, 0.6), diffuse=0.7, specular=0.2))
    inner = Sphere(transformation=scaling(Vec(0.5, 0.5, 0.5)))
    light = PointLight(position=Point(-10.0, 10.0, -10.0), intensity=Color(1.0, 1.0, 1.0))
    return World(shapes=[outer, inner], light=light, settings=settings)
