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

from typing import List, Optional, Tuple

from pywhitted.boundingbox import BoundingBox
from pywhitted.geometry import Point, Normal
from pywhitted.intersection import Intersection, sort_intersections
from pywhitted.materials import Material
from pywhitted.ray import Ray
from pywhitted.shapes import Shape, ShapeHierarchyError
from pywhitted.transformations import Transformation


class Group(Shape):
    """A collection of shapes sharing the same transformation

    Children are added using :meth:`.Group.add_child`; a shape can belong to one group only.
    The bounding box of the group is computed the first time it is needed and cached until
    the list of children changes.

    Call :meth:`.Group.divide` once the scene has been built to organize the children in a
    bounding-volume hierarchy: rays missing the box of a group never test its children.
    """

    def __init__(self, transformation: Transformation = Transformation(), material: Optional[Material] = None,
                 children: Optional[List[Shape]] = None, casts_shadow: bool = True):
        super().__init__(transformation, material, casts_shadow)
        self.children = []
        self._box = None

        for child in (children if children else []):
            self.add_child(child)

    def _invalidate_box(self):
        shape = self
        while shape is not None:
            if isinstance(shape, Group):
                shape._box = None
            shape = shape.parent

    def add_child(self, shape: Shape):
        """Add a shape to the group

        Raise :class:`.ShapeHierarchyError` if the shape is already in this group or belongs to
        some other group."""
        if any(child is shape for child in self.children):
            raise ShapeHierarchyError(f"the {type(shape).__name__} is already a child of this group")

        shape._set_parent(self)
        self.children.append(shape)
        self._invalidate_box()

    def remove_child(self, shape: Shape):
        """Detach a shape from the group, so that it can be added somewhere else"""
        for idx, child in enumerate(self.children):
            if child is shape:
                del self.children[idx]
                shape._clear_parent()
                self._invalidate_box()
                return

        raise ShapeHierarchyError(f"the {type(shape).__name__} is not a child of this group")

    def __len__(self):
        return len(self.children)

    def local_intersect(self, ray: Ray) -> List[Intersection]:
        if not self.local_bounding_box().intersects(ray):
            return []

        result = []
        for child in self.children:
            result.extend(child.intersect(ray))

        return sort_intersections(result)

    def local_normal_at(self, point: Point, hit: Optional[Intersection] = None) -> Normal:
        raise TypeError("groups have no normal: ask the shape that was hit instead")

    def local_bounding_box(self) -> BoundingBox:
        if self._box is None:
            box = BoundingBox()
            for child in self.children:
                box.add_box(child.bounding_box())

            self._box = box

        return self._box

    def includes(self, shape: Shape) -> bool:
        return (self is shape) or any(child.includes(shape) for child in self.children)

    def partition_children(self) -> Tuple[List[Shape], List[Shape]]:
        """Remove from the group the children that fit in either half of its bounding box

        Return the two lists of children that were removed. Children straddling the two halves
        are kept, and so are unbounded children (planes, infinite cylinders...): the box that gets
        split only encloses the finite ones. If one of the two halves would take all the finite children,
        nothing is removed."""
        boxes = [(child, child.bounding_box()) for child in self.children]

        finite_box = BoundingBox()
        for _, box in boxes:
            if box.is_finite():
                finite_box.add_box(box)

        if finite_box.is_empty():
            return [], []

        left_box, right_box = finite_box.split()

        left, right = [], []
        for child, box in boxes:
            if not box.is_finite():
                continue

            if left_box.contains_box(box):
                left.append(child)
            elif right_box.contains_box(box):
                right.append(child)

        finite_count = sum(1 for _, box in boxes if box.is_finite())
        if len(left) == finite_count or len(right) == finite_count:
            return [], []

        for child in left + right:
            self.remove_child(child)

        return left, right

    def make_subgroup(self, shapes: List[Shape]):
        """Wrap `shapes` in a new group and add it to the children of this group"""
        self.add_child(Group(children=shapes))

    def divide(self, threshold: int):
        """Split recursively the children of the group in subgroups

        This is done only if the group has more than `threshold` children."""
        if len(self.children) > threshold:
            left, right = self.partition_children()
            if left:
                self.make_subgroup(left)
            if right:
                self.make_subgroup(right)

        for child in self.children:
            child.divide(threshold)


def construct_bvh(shape: Shape, threshold: int = 4) -> Shape:
    """Build a bounding-volume hierarchy within `shape` and return it

    This must be done before rendering starts, as it modifies the children of the groups."""
    shape.divide(threshold)
    return shape
