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

from math import tan

from pywhitted.geometry import Point, ORIGIN
from pywhitted.ray import Ray
from pywhitted.transformations import Transformation


class Camera:
    """A perspective camera

    The camera produces images of `hsize × vsize` pixels; `field_of_view` is the angle (in radians)
    spanned by the longest side of the image. The camera sits in the origin and looks along the
    -Z axis, with +Y pointing up, unless `transformation` moves it elsewhere (use
    :func:`.view_transform` to build one easily). The screen is placed one unit in front of the eye."""

    def __init__(self, hsize: int, vsize: int, field_of_view: float,
                 transformation: Transformation = Transformation()):
        self.hsize = hsize
        self.vsize = vsize
        self.field_of_view = field_of_view
        self.transformation = transformation

        half_view = tan(field_of_view / 2)
        aspect = hsize / vsize
        if aspect >= 1.0:
            self.half_width = half_view
            self.half_height = half_view / aspect
        else:
            self.half_width = half_view * aspect
            self.half_height = half_view

        self.pixel_size = (self.half_width * 2) / hsize

    def fire_ray(self, x: int, y: int, u_pixel=0.5, v_pixel=0.5) -> Ray:
        """Shoot a ray through the pixel (x, y)

        The pixel (0, 0) is the top-left corner of the image. The values of `u_pixel` and `v_pixel`
        are in the range [0, 1] and tell where the ray crosses the pixel; 0.5 is the center."""
        # The camera looks towards -Z, so +X is on the left
        world_x = self.half_width - (x + u_pixel) * self.pixel_size
        world_y = self.half_height - (y + v_pixel) * self.pixel_size

        inverse = self.transformation.inverse()
        return Ray.towards(inverse * ORIGIN, inverse * Point(world_x, world_y, -1.0))
