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

from math import sin, cos

from pywhitted.geometry import Vec, Point, Normal
from pywhitted.misc import are_close

# Pivots smaller than this make a matrix numerically singular
SINGULARITY_THRESHOLD = 1e-12


class SingularMatrixError(ValueError):
    """Raised when a transformation is built out of a matrix that cannot be inverted"""

    def __init__(self, error_message):
        super().__init__(error_message)


def _identity():
    return [[1.0 if i == j else 0.0 for j in range(4)] for i in range(4)]


def _matr_prod(a, b):
    columns = list(zip(*b))
    return [[sum(x * y for (x, y) in zip(row, col)) for col in columns] for row in a]


def _are_matr_close(m1, m2):
    return all(are_close(x, y) for (row1, row2) in zip(m1, m2) for (x, y) in zip(row1, row2))


def _transpose(m):
    return [list(col) for col in zip(*m)]


def _invert(m):
    """Invert a 4×4 matrix using Gauss-Jordan elimination with partial pivoting

    Raise :class:`.SingularMatrixError` if the matrix is not invertible."""
    # Reduce [m | I] until it becomes [I | m⁻¹]
    rows = [list(row) + unit for (row, unit) in zip(m, _identity())]

    for col in range(4):
        best = max(range(col, 4), key=lambda r: abs(rows[r][col]))
        if abs(rows[best][col]) < SINGULARITY_THRESHOLD:
            raise SingularMatrixError("the matrix has a null determinant and cannot be inverted")

        rows[col], rows[best] = rows[best], rows[col]
        pivot_row = [x / rows[col][col] for x in rows[col]]
        rows[col] = pivot_row

        for idx, row in enumerate(rows):
            factor = row[col]
            if idx != col and factor != 0.0:
                rows[idx] = [x - factor * y for (x, y) in zip(row, pivot_row)]

    return [row[4:] for row in rows]


def _linear_part(m, x, y, z):
    """Apply the upper-left 3×3 block of `m` to (x, y, z)"""
    return tuple(row[0] * x + row[1] * y + row[2] * z for row in m[:3])


IDENTITY_MATR4x4 = _identity()


class Transformation:
    """An affine transformation.

    Both the matrix `m` and its inverse `invm` are stored, and every composition updates both:
    shapes need the inverse for every ray they intersect, and it is never recomputed while rendering.
    """
    def __init__(self, m=IDENTITY_MATR4x4, invm=IDENTITY_MATR4x4):
        self.m = m
        self.invm = invm

    @staticmethod
    def from_matrix(m):
        """Build a transformation out of a generic 4×4 matrix, computing its inverse

        Raise :class:`.SingularMatrixError` if `m` is not invertible."""
        return Transformation(m=[list(row) for row in m], invm=_invert(m))

    def __mul__(self, other):
        if isinstance(other, Transformation):
            # (A B)⁻¹ = B⁻¹ A⁻¹
            return Transformation(m=_matr_prod(self.m, other.m), invm=_matr_prod(other.invm, self.invm))
        elif isinstance(other, Vec):
            return Vec(*_linear_part(self.m, other.x, other.y, other.z))
        elif isinstance(other, Point):
            x, y, z = (a + row[3] for (a, row) in zip(_linear_part(self.m, other.x, other.y, other.z), self.m))
            bottom = self.m[3]
            w = bottom[0] * other.x + bottom[1] * other.y + bottom[2] * other.z + bottom[3]
            return Point(x, y, z) if w == 1.0 else Point(x / w, y / w, z / w)
        elif isinstance(other, Normal):
            # Normals use the transpose of the inverse, so the result stays perpendicular to the surface
            return Normal(*_linear_part(_transpose(self.invm), other.x, other.y, other.z))

        raise TypeError(f"Invalid type {type(other)} multiplied to a Transformation object")

    def is_consistent(self):
        """Return True if `invm` is really the inverse of `m`"""
        return _are_matr_close(_matr_prod(self.m, self.invm), IDENTITY_MATR4x4)

    def __repr__(self):
        rows = ",\n".join("   [" + " ".join(f"{x:6.3e}" for x in row) + "]" for row in self.m)
        return f"[\n{rows},\n]"

    def is_close(self, other):
        return _are_matr_close(self.m, other.m) and _are_matr_close(self.invm, other.invm)

    def inverse(self):
        """Return the inverse transformation; this only swaps the two matrices"""
        return Transformation(m=self.invm, invm=self.m)

    def transpose(self):
        return Transformation(m=_transpose(self.m), invm=_transpose(self.invm))


def translation(vec):
    """Return a :class:`.Transformation` that shifts everything by `vec`"""
    m, invm = _identity(), _identity()
    for i, shift in enumerate((vec.x, vec.y, vec.z)):
        m[i][3] = shift
        invm[i][3] = -shift

    return Transformation(m=m, invm=invm)


def scaling(vec):
    """Return a :class:`.Transformation` that scales the three axes by the components of `vec`

    None of them can be zero, otherwise :class:`.SingularMatrixError` is raised."""
    factors = (vec.x, vec.y, vec.z)
    if 0.0 in factors:
        raise SingularMatrixError(f"cannot scale by a null factor ({vec})")

    m, invm = _identity(), _identity()
    for i, factor in enumerate(factors):
        m[i][i] = factor
        invm[i][i] = 1 / factor

    return Transformation(m=m, invm=invm)


def _rotation(angle_rad: float, first: int, second: int):
    # Rotate the plane spanned by the axes `first` and `second`; the inverse is the transpose
    sinang, cosang = sin(angle_rad), cos(angle_rad)
    m = _identity()
    m[first][first] = m[second][second] = cosang
    m[first][second] = -sinang
    m[second][first] = sinang
    return Transformation(m=m, invm=_transpose(m))


def rotation_x(angle_rad: float):
    """Return a :class:`.Transformation` encoding a rotation of `angle_rad` radians around the X axis

    The positive sign is given by the right-hand rule, as for :func:`.rotation_y` and :func:`.rotation_z`."""
    return _rotation(angle_rad, 1, 2)


def rotation_y(angle_rad: float):
    return _rotation(angle_rad, 2, 0)


def rotation_z(angle_rad: float):
    return _rotation(angle_rad, 0, 1)


def shearing(xy: float, xz: float, yx: float, yz: float, zx: float, zy: float):
    """Return a :class:`.Transformation` object encoding a shear

    Each parameter tells how much a coordinate changes in proportion to another one: e.g., `xy`
    moves `x` in proportion to `y`."""
    return Transformation.from_matrix([[1.0, xy, xz, 0.0],
                                       [yx, 1.0, yz, 0.0],
                                       [zx, zy, 1.0, 0.0],
                                       [0.0, 0.0, 0.0, 1.0]])


def view_transform(origin: Point, target: Point, up: Vec):
    """Return the transformation that orients the world as seen by an eye

    The eye is placed in `origin` and looks at `target`; `up` is roughly the direction pointing
    upwards. The result is meant to be used as the transformation of a :class:`.Camera`."""
    forward = (target - origin).normalize()
    left = forward.cross(up.normalize())
    true_up = left.cross(forward)

    # `left` is not normalized when `up` is not orthogonal to `forward`, so the
    # orientation matrix is not always a pure rotation
    orientation = Transformation.from_matrix([[left.x, left.y, left.z, 0.0],
                                              [true_up.x, true_up.y, true_up.z, 0.0],
                                              [-forward.x, -forward.y, -forward.z, 0.0],
                                              [0.0, 0.0, 0.0, 1.0]])

    return orientation * translation(-origin.to_vec())
