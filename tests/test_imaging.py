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

from io import BytesIO, StringIO
from math import pi, sqrt
from pathlib import Path
from tempfile import TemporaryDirectory

import unittest

import pytest

from pywhitted.camera import Camera
from pywhitted.canvas import (
    Canvas,
    Endianness,
    InvalidImageFormat,
    read_pfm_image,
    read_ppm_image,
    read_ldr_image,
    read_image,
    _read_ascii_line,
    _pfm_size,
    _pfm_endianness,
)
from pywhitted.colors import Color, WHITE
from pywhitted.geometry import Vec, Point, ORIGIN
from pywhitted.imagetracer import ImageTracer
from pywhitted.lights import AreaLight
from pywhitted.pcg import PCG
from pywhitted.transformations import translation, rotation_y, view_transform
from pywhitted.world import default_world

# fmt: off

# This is the content of "reference_le.pfm" (little-endian file)
LE_REFERENCE_BYTES = bytes(
    [
        0x50, 0x46, 0x0A, 0x33, 0x20, 0x32, 0x0A, 0x2D,
        0x31, 0x2E, 0x30, 0x0A, 0x00, 0x00, 0xC8, 0x42,
        0x00, 0x00, 0x48, 0x43, 0x00, 0x00, 0x96, 0x43,
        0x00, 0x00, 0xC8, 0x43, 0x00, 0x00, 0xFA, 0x43,
        0x00, 0x00, 0x16, 0x44, 0x00, 0x00, 0x2F, 0x44,
        0x00, 0x00, 0x48, 0x44, 0x00, 0x00, 0x61, 0x44,
        0x00, 0x00, 0x20, 0x41, 0x00, 0x00, 0xA0, 0x41,
        0x00, 0x00, 0xF0, 0x41, 0x00, 0x00, 0x20, 0x42,
        0x00, 0x00, 0x48, 0x42, 0x00, 0x00, 0x70, 0x42,
        0x00, 0x00, 0x8C, 0x42, 0x00, 0x00, 0xA0, 0x42,
        0x00, 0x00, 0xB4, 0x42,
    ]
)

# This is the content of "reference_be.pfm" (big-endian file)
BE_REFERENCE_BYTES = bytes(
    [
        0x50, 0x46, 0x0A, 0x33, 0x20, 0x32, 0x0A, 0x31,
        0x2E, 0x30, 0x0A, 0x42, 0xC8, 0x00, 0x00, 0x43,
        0x48, 0x00, 0x00, 0x43, 0x96, 0x00, 0x00, 0x43,
        0xC8, 0x00, 0x00, 0x43, 0xFA, 0x00, 0x00, 0x44,
        0x16, 0x00, 0x00, 0x44, 0x2F, 0x00, 0x00, 0x44,
        0x48, 0x00, 0x00, 0x44, 0x61, 0x00, 0x00, 0x41,
        0x20, 0x00, 0x00, 0x41, 0xA0, 0x00, 0x00, 0x41,
        0xF0, 0x00, 0x00, 0x42, 0x20, 0x00, 0x00, 0x42,
        0x48, 0x00, 0x00, 0x42, 0x70, 0x00, 0x00, 0x42,
        0x8C, 0x00, 0x00, 0x42, 0xA0, 0x00, 0x00, 0x42,
        0xB4, 0x00, 0x00,
    ]
)

# fmt: on


def reference_image():
    img = Canvas(3, 2)

    img.set_pixel(0, 0, Color(1.0e1, 2.0e1, 3.0e1))
    img.set_pixel(1, 0, Color(4.0e1, 5.0e1, 6.0e1))
    img.set_pixel(2, 0, Color(7.0e1, 8.0e1, 9.0e1))
    img.set_pixel(0, 1, Color(1.0e2, 2.0e2, 3.0e2))
    img.set_pixel(1, 1, Color(4.0e2, 5.0e2, 6.0e2))
    img.set_pixel(2, 1, Color(7.0e2, 8.0e2, 9.0e2))

    return img


class TestCanvas(unittest.TestCase):
    def test_creation(self):
        img = Canvas(10, 20)
        assert img.width == 10
        assert img.height == 20
        assert all(pixel.is_close(Color(0.0, 0.0, 0.0)) for pixel in img.pixels)

    def test_coordinates(self):
        img = Canvas(7, 4)

        assert img.valid_coordinates(0, 0)
        assert img.valid_coordinates(6, 3)
        assert not img.valid_coordinates(-1, 0)
        assert not img.valid_coordinates(0, -1)
        assert not img.valid_coordinates(7, 0)

        assert img.pixel_offset(0, 0) == 0
        assert img.pixel_offset(3, 2) == 17
        assert img.pixel_offset(6, 3) == 7 * 4 - 1

    def test_get_set_pixel(self):
        img = Canvas(7, 4)

        reference_color = Color(1.0, 2.0, 3.0)
        img.set_pixel(3, 2, reference_color)
        assert reference_color.is_close(img.get_pixel(3, 2))

    def test_set_column(self):
        img = Canvas(2, 3)
        colors = [Color(1.0, 0.0, 0.0), Color(0.0, 1.0, 0.0), Color(0.0, 0.0, 1.0)]
        img.set_column(1, colors)

        for y, color in enumerate(colors):
            assert img.get_pixel(1, y).is_close(color)
            assert img.get_pixel(0, y).is_close(Color(0.0, 0.0, 0.0))

    def test_row(self):
        img = reference_image()
        assert [color.r for color in img.row(1)] == [1.0e2, 4.0e2, 7.0e2]

    def test_ppm_save(self):
        img = Canvas(5, 3)
        img.set_pixel(0, 0, Color(1.5, 0.0, 0.0))
        img.set_pixel(2, 1, Color(0.0, 0.5, 0.0))
        img.set_pixel(4, 2, Color(-0.5, 0.0, 1.0))

        buf = StringIO()
        img.write_ppm(buf)
        assert buf.getvalue() == (
            "P3\n"
            "5 3\n"
            "255\n"
            "255 0 0 0 0 0 0 0 0 0 0 0 0 0 0\n"
            "0 0 0 0 0 0 0 128 0 0 0 0 0 0 0\n"
            "0 0 0 0 0 0 0 0 0 0 0 0 0 0 255\n"
        )

    def test_ppm_long_lines(self):
        img = Canvas(10, 2)
        for x in range(10):
            img.set_column(x, [Color(1.0, 0.8, 0.6)] * 2)

        buf = StringIO()
        img.write_ppm(buf)
        lines = buf.getvalue().split("\n")

        assert lines[3:8] == [
            "255 204 153 255 204 153 255 204 153 255 204 153 255 204 153 255 204",
            "153 255 204 153 255 204 153 255 204 153 255 204 153",
            "255 204 153 255 204 153 255 204 153 255 204 153 255 204 153 255 204",
            "153 255 204 153 255 204 153 255 204 153 255 204 153",
            "",
        ]
        assert all(len(line) <= 70 for line in lines)
        assert buf.getvalue().endswith("\n")

    def test_ppm_read(self):
        stream = StringIO(
            "P3\n"
            "# A comment line\n"
            "2 2\n"
            "100\n"
            "100 50 0   0 0 100  # first row\n"
            "20 40 60\n"
            "0 0 0\n"
        )
        img = read_ppm_image(stream)

        assert img.width == 2
        assert img.height == 2
        assert img.get_pixel(0, 0).is_close(Color(1.0, 0.5, 0.0))
        assert img.get_pixel(1, 0).is_close(Color(0.0, 0.0, 1.0))
        assert img.get_pixel(0, 1).is_close(Color(0.2, 0.4, 0.6))
        assert img.get_pixel(1, 1).is_close(Color(0.0, 0.0, 0.0))

    def test_ppm_read_wrong(self):
        with pytest.raises(InvalidImageFormat):
            _ = read_ppm_image(StringIO("P32\n1 1\n255\n0 0 0\n"))

        with pytest.raises(InvalidImageFormat):
            _ = read_ppm_image(StringIO("P3\n1 x\n255\n0 0 0\n"))

        # Missing pixel data
        with pytest.raises(InvalidImageFormat):
            _ = read_ppm_image(StringIO("P3\n2 1\n255\n0 0 0\n"))

    def test_ppm_save_and_read(self):
        img = Canvas(3, 2)
        img.set_pixel(0, 0, Color(1.0, 0.0, 0.0))
        img.set_pixel(2, 1, Color(0.0, 0.2, 1.0))

        buf = StringIO()
        img.write_ppm(buf)
        buf.seek(0)
        result = read_ppm_image(buf)

        assert result.get_pixel(0, 0).is_close(Color(1.0, 0.0, 0.0))
        assert result.get_pixel(2, 1).is_close(Color(0.0, 51 / 255, 1.0))

    def test_pfm_save(self):
        img = reference_image()

        le_buf = BytesIO()
        img.write_pfm(le_buf, endianness=Endianness.LITTLE_ENDIAN)
        assert le_buf.getvalue() == LE_REFERENCE_BYTES

        be_buf = BytesIO()
        img.write_pfm(be_buf, endianness=Endianness.BIG_ENDIAN)
        assert be_buf.getvalue() == BE_REFERENCE_BYTES

    def test_pfm_read_line(self):
        line = BytesIO(b"hello\nworld")
        assert _read_ascii_line(line) == "hello"
        assert _read_ascii_line(line) == "world"
        assert _read_ascii_line(line) == ""

    def test_pfm_pfm_size(self):
        assert _pfm_size("3 2") == (3, 2)

        with pytest.raises(InvalidImageFormat):
            _ = _pfm_size("-1 3")

        with pytest.raises(InvalidImageFormat):
            _ = _pfm_size("3 2 1")

    def test_pfm_pfm_endianness(self):
        assert _pfm_endianness("1.0") == Endianness.BIG_ENDIAN
        assert _pfm_endianness("-1.0") == Endianness.LITTLE_ENDIAN

        with pytest.raises(InvalidImageFormat):
            _ = _pfm_endianness("2.0")

        with pytest.raises(InvalidImageFormat):
            _ = _pfm_endianness("abc")

    def test_pfm_read(self):
        reference = reference_image()
        for reference_bytes in [LE_REFERENCE_BYTES, BE_REFERENCE_BYTES]:
            img = read_pfm_image(BytesIO(reference_bytes))
            assert img.width == 3
            assert img.height == 2

            for x in range(3):
                for y in range(2):
                    assert img.get_pixel(x, y).is_close(reference.get_pixel(x, y))

    def test_pfm_read_wrong(self):
        buf = BytesIO(b"PF\n3 2\n-1.0\nstop")
        with pytest.raises(InvalidImageFormat):
            _ = read_pfm_image(buf)

        # Only one row out of two
        truncated = LE_REFERENCE_BYTES[:-4 * 9]
        with pytest.raises(InvalidImageFormat):
            _ = read_pfm_image(BytesIO(truncated))

    def test_ldr_save_and_read(self):
        img = Canvas(2, 1)
        img.set_pixel(0, 0, Color(1.0, 0.0, 0.0))
        img.set_pixel(1, 0, Color(0.2, 0.4, 2.0))

        buf = BytesIO()
        img.write_ldr_image(buf, "PNG")
        buf.seek(0)
        result = read_ldr_image(buf)

        assert result.width == 2
        assert result.height == 1
        assert result.get_pixel(0, 0).is_close(Color(1.0, 0.0, 0.0))
        assert result.get_pixel(1, 0).is_close(Color(51 / 255, 102 / 255, 1.0))

    def test_read_image(self):
        img = reference_image()

        with TemporaryDirectory() as tmpdir:
            file_name = Path(tmpdir) / "image.pfm"
            with file_name.open("wb") as outf:
                img.write_pfm(outf)

            result = read_image(file_name)

        assert result.width == 3
        assert result.height == 2
        assert result.get_pixel(2, 1).is_close(img.get_pixel(2, 1))

    def test_average_luminosity(self):
        img = Canvas(2, 1)

        img.set_pixel(0, 0, Color(0.5e1, 1.0e1, 1.5e1))
        img.set_pixel(1, 0, Color(0.5e3, 1.0e3, 1.5e3))

        assert pytest.approx(100.0) == img.average_luminosity(delta=0.0)

    def test_normalize_image(self):
        img = Canvas(2, 1)

        img.set_pixel(0, 0, Color(0.5e1, 1.0e1, 1.5e1))
        img.set_pixel(1, 0, Color(0.5e3, 1.0e3, 1.5e3))

        img.normalize_image(factor=1000.0, luminosity=100.0)
        assert img.get_pixel(0, 0).is_close(Color(0.5e2, 1.0e2, 1.5e2))
        assert img.get_pixel(1, 0).is_close(Color(0.5e4, 1.0e4, 1.5e4))

    def test_clamp_image(self):
        img = Canvas(2, 1)

        img.set_pixel(0, 0, Color(0.5e1, 1.0e1, 1.5e1))
        img.set_pixel(1, 0, Color(0.5e3, 1.0e3, 1.5e3))

        img.clamp_image()

        for cur_pixel in img.pixels:
            assert (cur_pixel.r >= 0) and (cur_pixel.r <= 1)
            assert (cur_pixel.g >= 0) and (cur_pixel.g <= 1)
            assert (cur_pixel.b >= 0) and (cur_pixel.b <= 1)


class TestCamera(unittest.TestCase):
    def test_pixel_size(self):
        assert Camera(200, 125, pi / 2).pixel_size == pytest.approx(0.01)
        assert Camera(125, 200, pi / 2).pixel_size == pytest.approx(0.01)

    def test_rays(self):
        camera = Camera(201, 101, pi / 2)

        ray = camera.fire_ray(100, 50)
        assert ray.origin.is_close(ORIGIN)
        assert ray.dir.is_close(Vec(0.0, 0.0, -1.0))

        ray = camera.fire_ray(0, 0)
        assert ray.origin.is_close(ORIGIN)
        assert ray.dir.is_close(Vec(0.66519, 0.33259, -0.66851), epsilon=1e-4)

    def test_transformed_camera(self):
        camera = Camera(201, 101, pi / 2,
                        transformation=rotation_y(pi / 4) * translation(Vec(0.0, -2.0, 5.0)))
        ray = camera.fire_ray(100, 50)

        assert ray.origin.is_close(Point(0.0, 2.0, -5.0))
        assert ray.dir.is_close(Vec(sqrt(2.0) / 2, 0.0, -sqrt(2.0) / 2))

    def test_pixel_offsets(self):
        camera = Camera(2, 2, pi / 2)

        # The four corners of the image
        assert camera.fire_ray(0, 0, 0.0, 0.0).dir.is_close(Vec(1.0, 1.0, -1.0).normalize())
        assert camera.fire_ray(1, 0, 1.0, 0.0).dir.is_close(Vec(-1.0, 1.0, -1.0).normalize())
        assert camera.fire_ray(0, 1, 0.0, 1.0).dir.is_close(Vec(1.0, -1.0, -1.0).normalize())
        assert camera.fire_ray(1, 1, 1.0, 1.0).dir.is_close(Vec(-1.0, -1.0, -1.0).normalize())


class TestImageTracer(unittest.TestCase):
    def setUp(self):
        self.world = default_world()
        self.camera = Camera(11, 11, pi / 2,
                             transformation=view_transform(Point(0.0, 0.0, -5.0), ORIGIN, Vec(0.0, 1.0, 0.0)))

    def test_orientation(self):
        tracer = ImageTracer(image=Canvas(11, 11), camera=self.camera)
        ray = tracer.fire_ray(5, 5)
        assert ray.is_close(self.camera.fire_ray(5, 5))

    def test_render(self):
        for parallel in [False, True]:
            image = Canvas(11, 11)
            tracer = ImageTracer(image=image, camera=self.camera)
            tracer.fire_all_rays(self.world, parallel=parallel, max_workers=4)

            assert image.get_pixel(5, 5).is_close(Color(0.38066, 0.47583, 0.2855), epsilon=1e-4)

    def test_parallel_matches_serial(self):
        self.world.light = AreaLight(Point(-10.5, 9.5, -10.0), Vec(1.0, 0.0, 0.0), 3, Vec(0.0, 1.0, 0.0), 3, WHITE)

        images = []
        for parallel in [False, True]:
            image = Canvas(11, 11)
            tracer = ImageTracer(image=image, camera=self.camera)
            tracer.fire_all_rays(self.world, parallel=parallel, max_workers=3, pcg=PCG())
            images.append(image)

        serial, parallel = images
        for x in range(11):
            for y in range(11):
                assert serial.get_pixel(x, y) == parallel.get_pixel(x, y)

    def test_callback(self):
        calls = []

        def callback(columns_done, label):
            calls.append((columns_done, label))

        tracer = ImageTracer(image=Canvas(11, 11), camera=self.camera)
        tracer.fire_all_rays(self.world, callback=callback, callback_time_s=0.0, label="test")

        assert calls[0] == (0, "test")
        assert all(0 <= done <= 11 and label == "test" for (done, label) in calls)

    def test_size_mismatch(self):
        with pytest.raises(AssertionError):
            _ = ImageTracer(image=Canvas(10, 11), camera=self.camera)
