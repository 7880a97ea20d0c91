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

from concurrent.futures import ThreadPoolExecutor, as_completed
from time import perf_counter
from typing import List, Optional

from pywhitted.camera import Camera
from pywhitted.canvas import Canvas
from pywhitted.colors import Color
from pywhitted.pcg import PCG


class ImageTracer:
    """Trace an image by shooting light rays through each of its pixels

    The image is traced one column at a time; columns can be computed in parallel by a pool of
    threads. The shapes of the scene are only read while tracing, so they can be shared by all
    the threads as long as any bounding-volume hierarchy has been built beforehand.
    """

    def __init__(self, image: Canvas, camera: Camera):
        """Initialize an ImageTracer object

        The parameter `image` must be a :class:`.Canvas` object that has already been initialized,
        with the same size as the images produced by `camera`."""
        assert (image.width, image.height) == (camera.hsize, camera.vsize), \
            "the image and the camera have different sizes"

        self.image = image
        self.camera = camera

    def fire_ray(self, col: int, row: int, u_pixel=0.5, v_pixel=0.5):
        """Shoot one light ray through image pixel (col, row)

        The parameters (col, row) are measured in the same way as they are in :class:`.Canvas`: the top left
        corner is placed at (0, 0)."""
        return self.camera.fire_ray(col, row, u_pixel, v_pixel)

    def trace_column(self, func, col: int, pcg: Optional[PCG] = None) -> List[Color]:
        """Compute the colors of the pixels in column `col`, from top to bottom"""
        return [func(self.fire_ray(col, row), pcg) for row in range(self.image.height)]

    def fire_all_rays(self, func, callback=None, callback_time_s: float = 2.0, parallel: bool = False,
                      max_workers: Optional[int] = None, pcg: Optional[PCG] = None, **callback_kwargs):
        """Shoot one light ray through each of the pixels in the image

        For each pixel in the :class:`.Canvas` object fire one ray, and pass it to the function `func`,
        which must accept a :class:`.Ray` and a :class:`.PCG` (possibly ``None``) and must return a
        :class:`.Color` instance telling the color to assign to that pixel in the image. A
        :class:`.World` object can be used as `func`.

        If `pcg` is provided, each column gets its own generator derived from it, so that the result
        does not depend on the order in which columns are computed.

        If `callback` is not ``None``, it is called with the number of completed columns (plus
        `callback_kwargs`) at the start, then at most once every `callback_time_s` seconds."""
        width = self.image.width
        column_pcgs = [pcg.split(col) for col in range(width)] if pcg else [None] * width

        last_call_time = perf_counter()
        if callback:
            callback(0, **callback_kwargs)

        def column_done(col, colors, completed):
            nonlocal last_call_time
            self.image.set_column(col, colors)

            current_time = perf_counter()
            if callback and (current_time - last_call_time > callback_time_s):
                callback(completed, **callback_kwargs)
                last_call_time = current_time

        if not parallel:
            for col in range(width):
                column_done(col, self.trace_column(func, col, column_pcgs[col]), col + 1)
            return

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self.trace_column, func, col, column_pcgs[col]): col
                for col in range(width)
            }

            # The columns are assembled here, in the calling thread
            for completed, future in enumerate(as_completed(futures), start=1):
                column_done(futures[future], future.result(), completed)
