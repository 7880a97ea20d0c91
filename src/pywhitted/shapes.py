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

import weakref
from math import sqrt, inf
from typing import List, Optional

from pywhitted.boundingbox import BoundingBox, check_axis
from pywhitted.geometry import Point, Normal, Vec2d
from pywhitted.intersection import Intersection
from pywhitted.materials import Material
from pywhitted.misc import EPSILON
from pywhitted.ray import Ray
from pywhitted.transformations import Transformation


class ShapeHierarchyError(ValueError):
    """Raised when a shape is added twice to a group, or to more than one group"""

    def __init__(self, error_message):
        super().__init__(error_message)


class Shape:
    """A generic 3D shape

    This is an abstract class, and you should only use it to derive
    concrete classes. Be sure to redefine the methods
    :meth:`.Shape.local_intersect`, :meth:`.Shape.local_normal_at`, and
    :meth:`.Shape.local_bounding_box`, which work in the local space of
    the shape. The methods without the `local_` prefix take care of the
    transformation of the shape and of the groups containing it.

    The parent of a shape (the :class:`.Group` or :class:`.CSG` object
    containing it) is stored as a weak reference.
    """

    def __init__(self, transformation: Transformation = Transformation(), material: Optional[Material] = None,
                 casts_shadow: bool = True):
        """Create a shape, potentially associating a transformation to it"""
        self.transformation = transformation
        self.material = material if material else Material()
        self.casts_shadow = casts_shadow
        self._parent = None

    @property
    def parent(self):
        return self._parent() if self._parent else None

    def _set_parent(self, parent):
        if self.parent is not None:
            raise ShapeHierarchyError(f"the {type(self).__name__} already belongs to a {type(self.parent).__name__}")

        self._parent = weakref.ref(parent)

    def _clear_parent(self):
        self._parent = None

    def intersect(self, ray: Ray) -> List[Intersection]:
        """Compute the intersections between a ray and this shape"""
        return self.local_intersect(ray.transform(self.transformation.inverse()))

    def local_intersect(self, ray: Ray) -> List[Intersection]:
        raise NotImplementedError("Shape.local_intersect is an abstract method and cannot be called directly")

    def world_to_object(self, point: Point) -> Point:
        """Convert a point from world space to the local space of this shape"""
        parent = self.parent
        if parent is not None:
            point = parent.world_to_object(point)

        return self.transformation.inverse() * point

    def normal_to_world(self, normal: Normal) -> Normal:
        """Convert a normal from the local space of this shape to world space"""
        normal = (self.transformation * normal).normalize()

        parent = self.parent
        if parent is not None:
            normal = parent.normal_to_world(normal)

        return normal

    def blocks_light(self) -> bool:
        """Return True if the shape casts shadows

        A shape inside a group (or CSG) that does not cast shadows never casts them either."""
        shape = self
        while shape is not None:
            if not shape.casts_shadow:
                return False
            shape = shape.parent

        return True

    def normal_at(self, world_point: Point, hit: Optional[Intersection] = None) -> Normal:
        """Return the normal to the surface at `world_point`, in world space

        The intersection `hit` is needed only by shapes that interpolate their normals."""
        local_point = self.world_to_object(world_point)
        local_normal = self.local_normal_at(local_point, hit)
        return self.normal_to_world(local_normal)

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        raise NotImplementedError("Shape.local_normal_at is an abstract method and cannot be called directly")

    def bounding_box(self) -> BoundingBox:
        """Return the box enclosing the shape in the space of its parent"""
        return self.local_bounding_box().transform(self.transformation)

    def local_bounding_box(self) -> BoundingBox:
        raise NotImplementedError("Shape.local_bounding_box is an abstract method and cannot be called directly")

    def includes(self, shape: "Shape") -> bool:
        """Return True if `shape` is this very shape or one of its descendants"""
        return self is shape

    def divide(self, threshold: int):
        """Build a bounding-volume hierarchy within this shape, if it has children"""
        pass


class Sphere(Shape):
    """A 3D unit sphere centered on the origin of the axes"""

    def local_intersect(self, ray: Ray) -> List[Intersection]:
        origin_vec = ray.origin.to_vec()
        a = ray.dir.squared_norm()
        b = 2.0 * origin_vec.dot(ray.dir)
        c = origin_vec.squared_norm() - 1.0

        delta = b * b - 4.0 * a * c
        if delta < 0.0:
            return []

        sqrt_delta = sqrt(delta)
        return [
            Intersection((-b - sqrt_delta) / (2.0 * a), self),
            Intersection((-b + sqrt_delta) / (2.0 * a), self),
        ]

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        return Normal(point.x, point.y, point.z)

    def local_bounding_box(self) -> BoundingBox:
        return BoundingBox(minimum=Point(-1.0, -1.0, -1.0), maximum=Point(1.0, 1.0, 1.0))


class Plane(Shape):
    """An infinite plane, coincident with the XZ plane"""

    def local_intersect(self, ray: Ray) -> List[Intersection]:
        if abs(ray.dir.y) < EPSILON:
            return []

        return [Intersection(-ray.origin.y / ray.dir.y, self)]

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        return Normal(0.0, 1.0, 0.0)

    def local_bounding_box(self) -> BoundingBox:
        return BoundingBox(minimum=Point(-inf, 0.0, -inf), maximum=Point(inf, 0.0, inf))


class Cube(Shape):
    """An axis-aligned cube spanning the range [-1, 1] along each axis"""

    def local_intersect(self, ray: Ray) -> List[Intersection]:
        xtmin, xtmax = check_axis(ray.origin.x, ray.dir.x, -1.0, 1.0)
        ytmin, ytmax = check_axis(ray.origin.y, ray.dir.y, -1.0, 1.0)
        ztmin, ztmax = check_axis(ray.origin.z, ray.dir.z, -1.0, 1.0)

        tmin = max(xtmin, ytmin, ztmin)
        tmax = min(xtmax, ytmax, ztmax)
        if tmin > tmax:
            return []

        return [Intersection(tmin, self), Intersection(tmax, self)]

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        maxc = max(abs(point.x), abs(point.y), abs(point.z))

        if maxc == abs(point.x):
            return Normal(point.x, 0.0, 0.0)
        elif maxc == abs(point.y):
            return Normal(0.0, point.y, 0.0)

        return Normal(0.0, 0.0, point.z)

    def local_bounding_box(self) -> BoundingBox:
        return BoundingBox(minimum=Point(-1.0, -1.0, -1.0), maximum=Point(1.0, 1.0, 1.0))


def _ray_hits_cap(ray: Ray, t: float, radius: float) -> bool:
    """Check whether the ray at time `t` is within `radius` from the Y axis"""
    x = ray.origin.x + t * ray.dir.x
    z = ray.origin.z + t * ray.dir.z
    return (x * x + z * z) <= radius * radius


class Cylinder(Shape):
    """A cylinder of unit radius around the Y axis

    The cylinder is truncated at `minimum` and `maximum` (both excluded) along the Y axis;
    by default it is infinite. If `closed` is True, the two ends are capped."""

    def __init__(self, transformation: Transformation = Transformation(), material: Optional[Material] = None,
                 minimum: float = -inf, maximum: float = inf, closed: bool = False, casts_shadow: bool = True):
        super().__init__(transformation, material, casts_shadow)
        self.minimum = minimum
        self.maximum = maximum
        self.closed = closed

    def _intersect_caps(self, ray: Ray, result: List[Intersection]):
        if (not self.closed) or abs(ray.dir.y) < EPSILON:
            return

        for y in (self.minimum, self.maximum):
            t = (y - ray.origin.y) / ray.dir.y
            if _ray_hits_cap(ray, t, 1.0):
                result.append(Intersection(t, self))

    def local_intersect(self, ray: Ray) -> List[Intersection]:
        result = []

        a = ray.dir.x ** 2 + ray.dir.z ** 2
        if abs(a) >= EPSILON:
            b = 2.0 * (ray.origin.x * ray.dir.x + ray.origin.z * ray.dir.z)
            c = ray.origin.x ** 2 + ray.origin.z ** 2 - 1.0
            delta = b * b - 4.0 * a * c
            if delta < 0.0:
                return []

            sqrt_delta = sqrt(delta)
            t0 = (-b - sqrt_delta) / (2.0 * a)
            t1 = (-b + sqrt_delta) / (2.0 * a)
            for t in sorted((t0, t1)):
                y = ray.origin.y + t * ray.dir.y
                if self.minimum < y < self.maximum:
                    result.append(Intersection(t, self))

        self._intersect_caps(ray, result)
        return result

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        dist = point.x ** 2 + point.z ** 2

        if dist < 1.0 and point.y >= self.maximum - EPSILON:
            return Normal(0.0, 1.0, 0.0)
        elif dist < 1.0 and point.y <= self.minimum + EPSILON:
            return Normal(0.0, -1.0, 0.0)

        return Normal(point.x, 0.0, point.z)

    def local_bounding_box(self) -> BoundingBox:
        return BoundingBox(minimum=Point(-1.0, self.minimum, -1.0), maximum=Point(1.0, self.maximum, 1.0))


class Cone(Shape):
    """A double-napped cone around the Y axis, with its apex in the origin

    The radius of the cone at height `y` is `|y|`. Like :class:`.Cylinder`, the cone is
    truncated at `minimum` and `maximum` and is capped if `closed` is True."""

    def __init__(self, transformation: Transformation = Transformation(), material: Optional[Material] = None,
                 minimum: float = -inf, maximum: float = inf, closed: bool = False, casts_shadow: bool = True):
        super().__init__(transformation, material, casts_shadow)
        self.minimum = minimum
        self.maximum = maximum
        self.closed = closed

    def _intersect_caps(self, ray: Ray, result: List[Intersection]):
        if (not self.closed) or abs(ray.dir.y) < EPSILON:
            return

        for y in (self.minimum, self.maximum):
            t = (y - ray.origin.y) / ray.dir.y
            if _ray_hits_cap(ray, t, abs(y)):
                result.append(Intersection(t, self))

    def _append_if_within_bounds(self, ray: Ray, t: float, result: List[Intersection]):
        y = ray.origin.y + t * ray.dir.y
        if self.minimum < y < self.maximum:
            result.append(Intersection(t, self))

    def local_intersect(self, ray: Ray) -> List[Intersection]:
        result = []

        o, d = ray.origin, ray.dir
        a = d.x ** 2 - d.y ** 2 + d.z ** 2
        b = 2.0 * (o.x * d.x - o.y * d.y + o.z * d.z)
        c = o.x ** 2 - o.y ** 2 + o.z ** 2

        if abs(a) < EPSILON:
            # The ray is parallel to one of the halves of the cone: at most one hit
            if abs(b) >= EPSILON:
                self._append_if_within_bounds(ray, -c / (2.0 * b), result)
        else:
            delta = b * b - 4.0 * a * c
            if delta < 0.0:
                return []

            sqrt_delta = sqrt(delta)
            t0 = (-b - sqrt_delta) / (2.0 * a)
            t1 = (-b + sqrt_delta) / (2.0 * a)
            for t in sorted((t0, t1)):
                self._append_if_within_bounds(ray, t, result)

        self._intersect_caps(ray, result)
        return result

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        dist = point.x ** 2 + point.z ** 2

        if dist < self.maximum ** 2 and point.y >= self.maximum - EPSILON:
            return Normal(0.0, 1.0, 0.0)
        elif dist < self.minimum ** 2 and point.y <= self.minimum + EPSILON:
            return Normal(0.0, -1.0, 0.0)

        y = sqrt(dist)
        if point.y > 0.0:
            y = -y

        return Normal(point.x, y, point.z)

    def local_bounding_box(self) -> BoundingBox:
        limit = max(abs(self.minimum), abs(self.maximum))
        return BoundingBox(minimum=Point(-limit, self.minimum, -limit), maximum=Point(limit, self.maximum, limit))


class Triangle(Shape):
    """A triangle with vertices `p1`, `p2`, and `p3`

    The edges and the normal are computed once, when the triangle is created."""

    def __init__(self, p1: Point, p2: Point, p3: Point, transformation: Transformation = Transformation(),
                 material: Optional[Material] = None, casts_shadow: bool = True):
        super().__init__(transformation, material, casts_shadow)
        self.p1 = p1
        self.p2 = p2
        self.p3 = p3
        self.e1 = p2 - p1
        self.e2 = p3 - p1

        n = self.e2.cross(self.e1)
        norm = n.norm()
        # Degenerate triangles have no normal, but they are never hit either
        self.normal = Normal(n.x / norm, n.y / norm, n.z / norm) if norm > 0.0 else Normal(0.0, 0.0, 0.0)

    def local_intersect(self, ray: Ray) -> List[Intersection]:
        # Möller-Trumbore algorithm
        dir_cross_e2 = ray.dir.cross(self.e2)
        det = self.e1.dot(dir_cross_e2)
        if abs(det) < EPSILON:
            return []

        f = 1.0 / det
        p1_to_origin = ray.origin - self.p1
        u = f * p1_to_origin.dot(dir_cross_e2)
        if u < 0.0 or u > 1.0:
            return []

        origin_cross_e1 = p1_to_origin.cross(self.e1)
        v = f * ray.dir.dot(origin_cross_e1)
        if v < 0.0 or (u + v) > 1.0:
            return []

        t = f * self.e2.dot(origin_cross_e1)
        return [Intersection(t, self, uv=Vec2d(u, v))]

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        return self.normal

    def local_bounding_box(self) -> BoundingBox:
        box = BoundingBox()
        for p in (self.p1, self.p2, self.p3):
            box.add_point(p)

        return box


class SmoothTriangle(Triangle):
    """A triangle whose normal is interpolated among the normals `n1`, `n2`, `n3` at its vertices"""

    def __init__(self, p1: Point, p2: Point, p3: Point, n1: Normal, n2: Normal, n3: Normal,
                 transformation: Transformation = Transformation(), material: Optional[Material] = None,
                 casts_shadow: bool = True):
        super().__init__(p1, p2, p3, transformation, material, casts_shadow)
        self.n1 = n1
        self.n2 = n2
        self.n3 = n3

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        assert hit is not None and hit.uv is not None, \
            "smooth triangles need the barycentric coordinates of the hit to compute normals"

        u, v = hit.uv.u, hit.uv.v
        return self.n2 * u + self.n3 * v + self.n1 * (1.0 - u - v)
