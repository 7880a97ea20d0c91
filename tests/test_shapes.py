# The MIT License (MIT)
#
# Copyright © 2021 Maurizio Tomasi
#
# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the “Software”), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software. THE
# SOFTWARE IS PROVIDED “AS IS”, WITHOUT WARRANTY OF ANY KIND, EXPRESS
# OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from math import pi, sqrt, inf

import unittest

import pytest

from pywhitted.geometry import Vec, Point, Normal, Vec2d
from pywhitted.intersection import Intersection, find_hit, sort_intersections
from pywhitted.ray import Ray
from pywhitted.shapes import Sphere, Plane, Cube, Cylinder, Cone, Triangle, SmoothTriangle
from pywhitted.transformations import translation, scaling, rotation_z


def ts(intersections):
    return [x.t for x in intersections]


class TestIntersections(unittest.TestCase):
    def test_equality(self):
        sphere = Sphere()
        assert Intersection(1.0, sphere) == Intersection(1.0, sphere, uv=Vec2d(0.2, 0.3))
        assert Intersection(1.0, sphere) != Intersection(1.0, Sphere())
        assert Intersection(1.0, sphere) != Intersection(2.0, sphere)

    def test_hit(self):
        sphere = Sphere()

        i1, i2 = Intersection(1.0, sphere), Intersection(2.0, sphere)
        assert find_hit([i2, i1]) is i1

        i1, i2 = Intersection(-1.0, sphere), Intersection(1.0, sphere)
        assert find_hit([i2, i1]) is i2

        assert find_hit([Intersection(-2.0, sphere), Intersection(-1.0, sphere)]) is None
        assert find_hit([]) is None

        intersections = [Intersection(t, sphere) for t in (5.0, 7.0, -3.0, 2.0)]
        assert find_hit(intersections) is intersections[3]

    def test_sort_is_stable(self):
        s1, s2 = Sphere(), Sphere()
        intersections = [Intersection(3.0, s1), Intersection(1.0, s1), Intersection(3.0, s2)]

        result = sort_intersections(intersections)
        assert ts(result) == [1.0, 3.0, 3.0]
        assert result[1].shape is s1
        assert result[2].shape is s2


class TestSphere(unittest.TestCase):
    def test_hit(self):
        sphere = Sphere()

        intersections = sphere.intersect(Ray(origin=Point(0.0, 0.0, -5.0), dir=Vec(0.0, 0.0, 1.0)))
        assert ts(intersections) == [pytest.approx(4.0), pytest.approx(6.0)]
        assert all(x.shape is sphere for x in intersections)

        # A tangent ray produces two coincident intersections
        intersections = sphere.intersect(Ray(origin=Point(0.0, 1.0, -5.0), dir=Vec(0.0, 0.0, 1.0)))
        assert ts(intersections) == [pytest.approx(5.0), pytest.approx(5.0)]

    def test_miss(self):
        sphere = Sphere()
        assert sphere.intersect(Ray(origin=Point(0.0, 2.0, -5.0), dir=Vec(0.0, 0.0, 1.0))) == []

    def test_inner_hit(self):
        sphere = Sphere()

        intersections = sphere.intersect(Ray(origin=Point(0.0, 0.0, 0.0), dir=Vec(0.0, 0.0, 1.0)))
        assert ts(intersections) == [pytest.approx(-1.0), pytest.approx(1.0)]

        intersections = sphere.intersect(Ray(origin=Point(0.0, 0.0, 5.0), dir=Vec(0.0, 0.0, 1.0)))
        assert ts(intersections) == [pytest.approx(-6.0), pytest.approx(-4.0)]

    def test_transformation(self):
        ray = Ray(origin=Point(0.0, 0.0, -5.0), dir=Vec(0.0, 0.0, 1.0))

        sphere = Sphere(transformation=scaling(Vec(2.0, 2.0, 2.0)))
        assert ts(sphere.intersect(ray)) == [pytest.approx(3.0), pytest.approx(7.0)]

        sphere = Sphere(transformation=translation(Vec(5.0, 0.0, 0.0)))
        assert sphere.intersect(ray) == []

    def test_normals(self):
        sphere = Sphere()
        third_sqrt3 = sqrt(3.0) / 3.0

        assert sphere.normal_at(Point(1.0, 0.0, 0.0)).is_close(Normal(1.0, 0.0, 0.0))
        assert sphere.normal_at(Point(0.0, 1.0, 0.0)).is_close(Normal(0.0, 1.0, 0.0))
        assert sphere.normal_at(Point(0.0, 0.0, 1.0)).is_close(Normal(0.0, 0.0, 1.0))

        normal = sphere.normal_at(Point(third_sqrt3, third_sqrt3, third_sqrt3))
        assert normal.is_close(Normal(third_sqrt3, third_sqrt3, third_sqrt3))
        assert pytest.approx(1.0) == normal.norm()

    def test_transformed_normals(self):
        sphere = Sphere(transformation=translation(Vec(0.0, 1.0, 0.0)))
        normal = sphere.normal_at(Point(0.0, 1.70711, -0.70711))
        assert normal.is_close(Normal(0.0, 0.70711, -0.70711))

        sphere = Sphere(transformation=scaling(Vec(1.0, 0.5, 1.0)) * rotation_z(pi / 5))
        normal = sphere.normal_at(Point(0.0, sqrt(2.0) / 2, -sqrt(2.0) / 2))
        assert normal.is_close(Normal(0.0, 0.97014, -0.24254))

    def test_bounding_box(self):
        box = Sphere(transformation=translation(Vec(1.0, 2.0, 3.0))).bounding_box()
        assert box.minimum.is_close(Point(0.0, 1.0, 2.0))
        assert box.maximum.is_close(Point(2.0, 3.0, 4.0))


class TestPlane(unittest.TestCase):
    def test_normal(self):
        plane = Plane()
        for point in [Point(0.0, 0.0, 0.0), Point(10.0, 0.0, -10.0), Point(-5.0, 0.0, 150.0)]:
            assert plane.local_normal_at(point).is_close(Normal(0.0, 1.0, 0.0))

    def test_parallel_rays(self):
        plane = Plane()
        assert plane.intersect(Ray(origin=Point(0.0, 10.0, 0.0), dir=Vec(0.0, 0.0, 1.0))) == []

        # Coplanar rays do not see the plane either
        assert plane.intersect(Ray(origin=Point(0.0, 0.0, 0.0), dir=Vec(0.0, 0.0, 1.0))) == []

    def test_hit(self):
        plane = Plane()

        intersections = plane.intersect(Ray(origin=Point(0.0, 1.0, 0.0), dir=Vec(0.0, -1.0, 0.0)))
        assert ts(intersections) == [pytest.approx(1.0)]
        assert intersections[0].shape is plane

        intersections = plane.intersect(Ray(origin=Point(0.0, -1.0, 0.0), dir=Vec(0.0, 1.0, 0.0)))
        assert ts(intersections) == [pytest.approx(1.0)]

    def test_bounding_box(self):
        box = Plane().local_bounding_box()
        assert box.minimum.x == -inf and box.maximum.x == inf
        assert box.minimum.y == 0.0 and box.maximum.y == 0.0
        assert box.minimum.z == -inf and box.maximum.z == inf


class TestCube(unittest.TestCase):
    def test_hit(self):
        cube = Cube()
        for origin, direction, t1, t2 in [
            (Point(5.0, 0.5, 0.0), Vec(-1.0, 0.0, 0.0), 4.0, 6.0),
            (Point(-5.0, 0.5, 0.0), Vec(1.0, 0.0, 0.0), 4.0, 6.0),
            (Point(0.5, 5.0, 0.0), Vec(0.0, -1.0, 0.0), 4.0, 6.0),
            (Point(0.5, -5.0, 0.0), Vec(0.0, 1.0, 0.0), 4.0, 6.0),
            (Point(0.5, 0.0, 5.0), Vec(0.0, 0.0, -1.0), 4.0, 6.0),
            (Point(0.5, 0.0, -5.0), Vec(0.0, 0.0, 1.0), 4.0, 6.0),
            (Point(0.0, 0.5, 0.0), Vec(0.0, 0.0, 1.0), -1.0, 1.0),
        ]:
            intersections = cube.intersect(Ray(origin=origin, dir=direction))
            assert ts(intersections) == [pytest.approx(t1), pytest.approx(t2)]

    def test_miss(self):
        cube = Cube()
        for origin, direction in [
            (Point(-2.0, 0.0, 0.0), Vec(0.2673, 0.5345, 0.8018)),
            (Point(0.0, -2.0, 0.0), Vec(0.8018, 0.2673, 0.5345)),
            (Point(0.0, 0.0, -2.0), Vec(0.5345, 0.8018, 0.2673)),
            (Point(2.0, 0.0, 2.0), Vec(0.0, 0.0, -1.0)),
            (Point(0.0, 2.0, 2.0), Vec(0.0, -1.0, 0.0)),
            (Point(2.0, 2.0, 0.0), Vec(-1.0, 0.0, 0.0)),
        ]:
            assert cube.intersect(Ray(origin=origin, dir=direction)) == []

    def test_normals(self):
        cube = Cube()
        for point, normal in [
            (Point(1.0, 0.5, -0.8), Normal(1.0, 0.0, 0.0)),
            (Point(-1.0, -0.2, 0.9), Normal(-1.0, 0.0, 0.0)),
            (Point(-0.4, 1.0, -0.1), Normal(0.0, 1.0, 0.0)),
            (Point(0.3, -1.0, -0.7), Normal(0.0, -1.0, 0.0)),
            (Point(-0.6, 0.3, 1.0), Normal(0.0, 0.0, 1.0)),
            (Point(0.4, 0.4, -1.0), Normal(0.0, 0.0, -1.0)),
            (Point(1.0, 1.0, 1.0), Normal(1.0, 0.0, 0.0)),
            (Point(-1.0, -1.0, -1.0), Normal(-1.0, 0.0, 0.0)),
        ]:
            assert cube.local_normal_at(point).is_close(normal)


class TestCylinder(unittest.TestCase):
    def test_miss(self):
        cylinder = Cylinder()
        for origin, direction in [
            (Point(1.0, 0.0, 0.0), Vec(0.0, 1.0, 0.0)),
            (Point(0.0, 0.0, 0.0), Vec(0.0, 1.0, 0.0)),
            (Point(0.0, 0.0, -5.0), Vec(1.0, 1.0, 1.0)),
        ]:
            assert cylinder.intersect(Ray(origin=origin, dir=direction.normalize())) == []

    def test_hit(self):
        cylinder = Cylinder()
        for origin, direction, t1, t2 in [
            (Point(1.0, 0.0, -5.0), Vec(0.0, 0.0, 1.0), 5.0, 5.0),
            (Point(0.0, 0.0, -5.0), Vec(0.0, 0.0, 1.0), 4.0, 6.0),
            (Point(0.5, 0.0, -5.0), Vec(0.1, 1.0, 1.0), 6.80798, 7.08872),
        ]:
            intersections = cylinder.intersect(Ray(origin=origin, dir=direction.normalize()))
            assert ts(intersections) == [pytest.approx(t1, abs=1e-4), pytest.approx(t2, abs=1e-4)]

    def test_normals(self):
        cylinder = Cylinder()
        for point, normal in [
            (Point(1.0, 0.0, 0.0), Normal(1.0, 0.0, 0.0)),
            (Point(0.0, 5.0, -1.0), Normal(0.0, 0.0, -1.0)),
            (Point(0.0, -2.0, 1.0), Normal(0.0, 0.0, 1.0)),
            (Point(-1.0, 1.0, 0.0), Normal(-1.0, 0.0, 0.0)),
        ]:
            assert cylinder.local_normal_at(point).is_close(normal)

    def test_defaults(self):
        cylinder = Cylinder()
        assert cylinder.minimum == -inf
        assert cylinder.maximum == inf
        assert not cylinder.closed

    def test_truncated(self):
        cylinder = Cylinder(minimum=1.0, maximum=2.0)
        for origin, direction, count in [
            (Point(0.0, 1.5, 0.0), Vec(0.1, 1.0, 0.0), 0),
            (Point(0.0, 3.0, -5.0), Vec(0.0, 0.0, 1.0), 0),
            (Point(0.0, 0.0, -5.0), Vec(0.0, 0.0, 1.0), 0),
            (Point(0.0, 2.0, -5.0), Vec(0.0, 0.0, 1.0), 0),
            (Point(0.0, 1.0, -5.0), Vec(0.0, 0.0, 1.0), 0),
            (Point(0.0, 1.5, -2.0), Vec(0.0, 0.0, 1.0), 2),
        ]:
            assert len(cylinder.intersect(Ray(origin=origin, dir=direction.normalize()))) == count

    def test_caps(self):
        cylinder = Cylinder(minimum=1.0, maximum=2.0, closed=True)
        for origin, direction in [
            (Point(0.0, 3.0, 0.0), Vec(0.0, -1.0, 0.0)),
            (Point(0.0, 3.0, -2.0), Vec(0.0, -1.0, 2.0)),
            (Point(0.0, 0.0, -2.0), Vec(0.0, 1.0, 2.0)),
        ]:
            assert len(cylinder.intersect(Ray(origin=origin, dir=direction.normalize()))) == 2

    def test_cap_normals(self):
        cylinder = Cylinder(minimum=1.0, maximum=2.0, closed=True)
        for point, normal in [
            (Point(0.0, 1.0, 0.0), Normal(0.0, -1.0, 0.0)),
            (Point(0.5, 1.0, 0.0), Normal(0.0, -1.0, 0.0)),
            (Point(0.0, 1.0, 0.5), Normal(0.0, -1.0, 0.0)),
            (Point(0.0, 2.0, 0.0), Normal(0.0, 1.0, 0.0)),
            (Point(0.5, 2.0, 0.0), Normal(0.0, 1.0, 0.0)),
            (Point(0.0, 2.0, 0.5), Normal(0.0, 1.0, 0.0)),
        ]:
            assert cylinder.local_normal_at(point).is_close(normal)

    def test_bounding_box(self):
        box = Cylinder(minimum=-5.0, maximum=3.0).local_bounding_box()
        assert box.minimum.is_close(Point(-1.0, -5.0, -1.0))
        assert box.maximum.is_close(Point(1.0, 3.0, 1.0))


class TestCone(unittest.TestCase):
    def test_hit(self):
        cone = Cone()
        for origin, direction, t1, t2 in [
            (Point(0.0, 0.0, -5.0), Vec(0.0, 0.0, 1.0), 5.0, 5.0),
            (Point(0.0, 0.0, -5.0), Vec(1.0, 1.0, 1.0), 8.66025, 8.66025),
            (Point(1.0, 1.0, -5.0), Vec(-0.5, -1.0, 1.0), 4.55006, 49.44994),
        ]:
            intersections = cone.intersect(Ray(origin=origin, dir=direction.normalize()))
            assert ts(intersections) == [pytest.approx(t1, abs=1e-4), pytest.approx(t2, abs=1e-4)]

    def test_parallel_ray(self):
        cone = Cone()
        ray = Ray(origin=Point(0.0, 0.0, -1.0), dir=Vec(0.0, 1.0, 1.0).normalize())
        intersections = cone.intersect(ray)
        assert ts(intersections) == [pytest.approx(0.35355, abs=1e-4)]

    def test_caps(self):
        cone = Cone(minimum=-0.5, maximum=0.5, closed=True)
        for origin, direction, count in [
            (Point(0.0, 0.0, -5.0), Vec(0.0, 1.0, 0.0), 0),
            (Point(0.0, 0.0, -0.25), Vec(0.0, 1.0, 1.0), 2),
            (Point(0.0, 0.0, -0.25), Vec(0.0, 1.0, 0.0), 4),
        ]:
            assert len(cone.intersect(Ray(origin=origin, dir=direction.normalize()))) == count

    def test_normals(self):
        cone = Cone()
        for point, normal in [
            (Point(0.0, 0.0, 0.0), Normal(0.0, 0.0, 0.0)),
            (Point(1.0, 1.0, 1.0), Normal(1.0, -sqrt(2.0), 1.0)),
            (Point(-1.0, -1.0, 0.0), Normal(-1.0, 1.0, 0.0)),
        ]:
            assert cone.local_normal_at(point).is_close(normal)

    def test_bounding_box(self):
        box = Cone(minimum=-5.0, maximum=3.0).local_bounding_box()
        assert box.minimum.is_close(Point(-5.0, -5.0, -5.0))
        assert box.maximum.is_close(Point(5.0, 3.0, 5.0))


def default_triangle():
    return Triangle(Point(0.0, 1.0, 0.0), Point(-1.0, 0.0, 0.0), Point(1.0, 0.0, 0.0))


class TestTriangle(unittest.TestCase):
    def test_construction(self):
        triangle = default_triangle()
        assert triangle.e1.is_close(Vec(-1.0, -1.0, 0.0))
        assert triangle.e2.is_close(Vec(1.0, -1.0, 0.0))
        assert triangle.normal.is_close(Normal(0.0, 0.0, -1.0))

    def test_normal(self):
        triangle = default_triangle()
        for point in [Point(0.0, 0.5, 0.0), Point(-0.5, 0.75, 0.0), Point(0.5, 0.25, 0.0)]:
            assert triangle.local_normal_at(point).is_close(triangle.normal)

    def test_miss(self):
        triangle = default_triangle()
        for origin, direction in [
            (Point(0.0, -1.0, -2.0), Vec(0.0, 1.0, 0.0)),
            (Point(1.0, 1.0, -2.0), Vec(0.0, 0.0, 1.0)),
            (Point(-1.0, 1.0, -2.0), Vec(0.0, 0.0, 1.0)),
            (Point(0.0, -1.0, -2.0), Vec(0.0, 0.0, 1.0)),
        ]:
            assert triangle.intersect(Ray(origin=origin, dir=direction)) == []

    def test_hit(self):
        triangle = default_triangle()
        intersections = triangle.intersect(Ray(origin=Point(0.0, 0.5, -2.0), dir=Vec(0.0, 0.0, 1.0)))
        assert ts(intersections) == [pytest.approx(2.0)]
        assert intersections[0].uv is not None

    def test_degenerate(self):
        triangle = Triangle(Point(0.0, 0.0, 0.0), Point(1.0, 0.0, 0.0), Point(2.0, 0.0, 0.0))
        assert triangle.intersect(Ray(origin=Point(1.0, 0.0, -1.0), dir=Vec(0.0, 0.0, 1.0))) == []

    def test_bounding_box(self):
        triangle = Triangle(Point(-3.0, 7.0, 2.0), Point(6.0, 2.0, -4.0), Point(2.0, -1.0, -1.0))
        box = triangle.local_bounding_box()
        assert box.minimum.is_close(Point(-3.0, -1.0, -4.0))
        assert box.maximum.is_close(Point(6.0, 7.0, 2.0))


def default_smooth_triangle():
    return SmoothTriangle(
        Point(0.0, 1.0, 0.0), Point(-1.0, 0.0, 0.0), Point(1.0, 0.0, 0.0),
        Normal(0.0, 1.0, 0.0), Normal(-1.0, 0.0, 0.0), Normal(1.0, 0.0, 0.0),
    )


class TestSmoothTriangle(unittest.TestCase):
    def test_uv(self):
        triangle = default_smooth_triangle()
        intersections = triangle.intersect(Ray(origin=Point(-0.2, 0.3, -2.0), dir=Vec(0.0, 0.0, 1.0)))

        assert len(intersections) == 1
        assert intersections[0].uv.is_close(Vec2d(0.45, 0.25))

    def test_interpolated_normal(self):
        triangle = default_smooth_triangle()
        hit = Intersection(1.0, triangle, uv=Vec2d(0.45, 0.25))

        normal = triangle.normal_at(Point(0.0, 0.0, 0.0), hit)
        assert normal.is_close(Normal(-0.5547, 0.83205, 0.0), epsilon=1e-4)

    def test_missing_uv(self):
        triangle = default_smooth_triangle()
        with pytest.raises(AssertionError):
            _ = triangle.normal_at(Point(0.0, 0.0, 0.0), Intersection(1.0, triangle))
