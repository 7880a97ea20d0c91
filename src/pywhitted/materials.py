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
from typing import Optional

from pywhitted.colors import Color, BLACK
from pywhitted.geometry import Point, Vec, Normal
from pywhitted.patterns import Pattern


@dataclass
class Material:
    """The optical properties of a surface, following the Phong model

    The class has the following members:

    -   `color`: the color of the surface, used when `pattern` is ``None``
    -   `pattern`: an optional :class:`.Pattern` overriding `color`
    -   `ambient`, `diffuse`, `specular`: the weights of the three terms of the Phong model
    -   `shininess`: the exponent of the specular term; large values make small highlights
    -   `reflective`: 0 for a matte surface, 1 for a perfect mirror
    -   `transparency`: 0 for an opaque surface, 1 for a perfectly transparent one
    -   `refractive_index`: the index of refraction of the medium inside the surface
    """
    color: Color = field(default_factory=lambda: Color(1.0, 1.0, 1.0))
    pattern: Optional[Pattern] = None
    ambient: float = 0.1
    diffuse: float = 0.9
    specular: float = 0.9
    shininess: float = 200.0
    reflective: float = 0.0
    transparency: float = 0.0
    refractive_index: float = 1.0

    def lighting(self, shape, light, point: Point, eye: Vec, normal: Normal,
                 shadow_intensity: float = 0.0) -> Color:
        """Compute the color of `point` on `shape`, as seen from the direction `eye`

        `light` can be any light exposing `intensity` and `samples`; the contribution of each
        sample is averaged. The diffuse and specular terms are scaled by `1 - shadow_intensity`,
        so that a point in full shadow only receives the ambient term."""
        surface_color = self.pattern.color_at_shape(shape, point) if self.pattern else self.color
        effective_color = surface_color * light.intensity

        ambient = effective_color * self.ambient
        if shadow_intensity >= 1.0:
            return ambient

        normal_vec = normal.to_vec()
        total = BLACK
        samples = light.samples
        for sample in samples:
            light_dir = (sample - point).normalize()
            light_dot_normal = light_dir.dot(normal_vec)
            if light_dot_normal < 0.0:
                # The light is on the other side of the surface
                continue

            total += effective_color * (self.diffuse * light_dot_normal)

            reflect_dir = (-light_dir).reflect(normal)
            reflect_dot_eye = reflect_dir.dot(eye)
            if reflect_dot_eye > 0.0:
                factor = reflect_dot_eye ** self.shininess
                total += light.intensity * (self.specular * factor)

        return ambient + total * ((1.0 - shadow_intensity) / len(samples))
