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

from typing import Dict, List, Optional, Tuple

from pywhitted.geometry import Point, Normal
from pywhitted.groups import Group
from pywhitted.shapes import Triangle, SmoothTriangle


class ObjFileError(Exception):
    """An error found while reading a Wavefront OBJ file

    The attribute `line_num` holds the (1-based) number of the offending line."""

    def __init__(self, line_num: int, message: str):
        super().__init__(f"line {line_num}: {message}")
        self.line_num = line_num
        self.message = message


class ObjFile:
    """The contents of a Wavefront OBJ file

    The class has the following members:

    -   `vertices`: the list of vertices. Beware that OBJ files number them starting from 1,
        use :meth:`.ObjFile.vertex` to access them the same way.
    -   `normals`: the list of vertex normals (also numbered from 1 in OBJ files)
    -   `default_group`: a :class:`.Group` holding the triangles that precede any `g` statement
    -   `groups`: a dictionary associating the name of each group with a :class:`.Group`
    -   `triangles`: all the triangles in the file, regardless of their group
    -   `ignored_lines`: the number of lines that were not understood
    """

    def __init__(self):
        self.vertices: List[Point] = []
        self.normals: List[Normal] = []
        self.default_group = Group()
        self.groups: Dict[str, Group] = {}
        self.triangles: List[Triangle] = []
        self.ignored_lines = 0

    def vertex(self, index: int) -> Point:
        """Return the vertex with the given index, counting from 1"""
        return self.vertices[index - 1]

    def normal(self, index: int) -> Normal:
        """Return the normal with the given index, counting from 1"""
        return self.normals[index - 1]

    def to_group(self) -> Group:
        """Return a group containing all the triangles in the file

        Named groups become subgroups of the result. This method can be called only once, as
        each group can belong to one parent only."""
        result = Group()
        if self.default_group.children:
            result.add_child(self.default_group)

        for group in self.groups.values():
            result.add_child(group)

        return result


def _resolve_index(token: str, count: int, what: str, line_num: int) -> int:
    """Convert an OBJ index (1-based, or negative for relative indices) into a 1-based index"""
    try:
        index = int(token)
    except ValueError:
        raise ObjFileError(line_num, f"invalid {what} index «{token}»")

    if index < 0:
        index = count + index + 1

    if not (1 <= index <= count):
        raise ObjFileError(line_num, f"{what} index {token} out of range (there are {count} {what}s)")

    return index


def _parse_face_vertex(token: str, obj: ObjFile, line_num: int) -> Tuple[int, Optional[int]]:
    """Parse the `v`, `v/vt`, `v//vn`, or `v/vt/vn` specification of a face vertex

    Return the indices of the vertex and of its normal (``None`` if missing). Texture
    coordinates are not used."""
    parts = token.split("/")
    if len(parts) > 3:
        raise ObjFileError(line_num, f"invalid face vertex «{token}»")

    vertex_idx = _resolve_index(parts[0], len(obj.vertices), "vertex", line_num)

    normal_idx = None
    if len(parts) == 3 and parts[2]:
        normal_idx = _resolve_index(parts[2], len(obj.normals), "normal", line_num)

    return vertex_idx, normal_idx


def _parse_floats(tokens: List[str], line_num: int) -> List[float]:
    if len(tokens) < 3:
        raise ObjFileError(line_num, "three coordinates expected")

    try:
        return [float(x) for x in tokens[:3]]
    except ValueError:
        raise ObjFileError(line_num, f"invalid coordinates «{' '.join(tokens)}»")


def _fan_triangulation(obj: ObjFile, face: List[Tuple[int, Optional[int]]]) -> List[Triangle]:
    """Split a convex polygon into triangles sharing the first vertex"""
    smooth = all(normal_idx is not None for (_, normal_idx) in face)

    result = []
    for idx in range(1, len(face) - 1):
        (v1, n1), (v2, n2), (v3, n3) = face[0], face[idx], face[idx + 1]
        if smooth:
            result.append(SmoothTriangle(obj.vertex(v1), obj.vertex(v2), obj.vertex(v3),
                                         obj.normal(n1), obj.normal(n2), obj.normal(n3)))
        else:
            result.append(Triangle(obj.vertex(v1), obj.vertex(v2), obj.vertex(v3)))

    return result


def parse_obj(stream) -> ObjFile:
    """Read a Wavefront OBJ file from a text stream

    The statements `v`, `vn`, `f`, and `g` are supported; any other line is counted in
    :attr:`.ObjFile.ignored_lines`. Raise :class:`.ObjFileError` if the file is malformed."""
    obj = ObjFile()
    current_group = obj.default_group

    for line_num, line in enumerate(stream, start=1):
        tokens = line.split()
        if not tokens:
            continue

        keyword, args = tokens[0], tokens[1:]
        if keyword == "v":
            obj.vertices.append(Point(*_parse_floats(args, line_num)))
        elif keyword == "vn":
            obj.normals.append(Normal(*_parse_floats(args, line_num)))
        elif keyword == "f":
            if len(args) < 3:
                raise ObjFileError(line_num, "a face needs at least three vertices")

            face = [_parse_face_vertex(token, obj, line_num) for token in args]
            for triangle in _fan_triangulation(obj, face):
                current_group.add_child(triangle)
                obj.triangles.append(triangle)
        elif keyword == "g" and args:
            name = " ".join(args)
            if name not in obj.groups:
                obj.groups[name] = Group()
            current_group = obj.groups[name]
        else:
            obj.ignored_lines += 1

    return obj
