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

from enum import Enum
from typing import List, Optional

from pywhitted.boundingbox import BoundingBox
from pywhitted.geometry import Point, Normal
from pywhitted.intersection import Intersection, sort_intersections
from pywhitted.materials import Material
from pywhitted.ray import Ray
from pywhitted.shapes import Shape
from pywhitted.transformations import Transformation


class CsgOperation(Enum):
    """Boolean operations supported by :class:`.CSG`"""
    UNION = "union"
    INTERSECT = "intersect"
    DIFFERENCE = "difference"

    def allows(self, hit_left: bool, inside_left: bool, inside_right: bool) -> bool:
        """Tell whether an intersection belongs to the surface of the combined shape

        `hit_left` is True if the intersection is on the left operand; `inside_left` and
        `inside_right` tell whether the ray is currently inside each of the two operands."""
        if self == CsgOperation.UNION:
            return (hit_left and not inside_right) or (not hit_left and not inside_left)
        elif self == CsgOperation.INTERSECT:
            return (hit_left and inside_right) or (not hit_left and inside_left)

        return (hit_left and not inside_right) or (not hit_left and inside_left)


class CSG(Shape):
    """A shape built by combining two shapes with a boolean operation

    Both `left` and `right` become children of the new shape, so they must not belong
    to any group."""

    def __init__(self, operation: CsgOperation, left: Shape, right: Shape,
                 transformation: Transformation = Transformation(), material: Optional[Material] = None,
                 casts_shadow: bool = True):
        super().__init__(transformation, material, casts_shadow)
        self.operation = operation
        self.left = left
        self.right = right

        left._set_parent(self)
        right._set_parent(self)

    def filter_intersections(self, intersections: List[Intersection]) -> List[Intersection]:
        """Keep only the intersections that lie on the surface of the combined shape

        The list must be sorted by increasing `t`."""
        inside_left = False
        inside_right = False

        result = []
        for intersection in intersections:
            hit_left = self.left.includes(intersection.shape)
            if self.operation.allows(hit_left, inside_left, inside_right):
                result.append(intersection)

            if hit_left:
                inside_left = not inside_left
            else:
                inside_right = not inside_right

        return result

    def local_intersect(self, ray: Ray) -> List[Intersection]:
        if not self.local_bounding_box().intersects(ray):
            return []

        intersections = sort_intersections(self.left.intersect(ray) + self.right.intersect(ray))
        return self.filter_intersections(intersections)

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        raise TypeError("CSG shapes have no normal: ask the shape that was hit instead")

    def local_bounding_box(self) -> BoundingBox:
        box = BoundingBox()
        box.add_box(self.left.bounding_box())
        box.add_box(self.right.bounding_box())
        return box

    def includes(self, shape: Shape) -> bool:
        return (self is shape) or self.left.includes(shape) or self.right.includes(shape)

    def divide(self, threshold: int):
        self.left.divide(threshold)
        self.right.divide(threshold)
