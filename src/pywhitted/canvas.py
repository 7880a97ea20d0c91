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

import math
import struct
import textwrap
from enum import Enum
from pathlib import Path
from typing import List

from pywhitted.colors import Color


class Endianness(Enum):
    """Byte order of the floating-point values in a PFM file

    The value of each member is the prefix used by the :mod:`struct` module."""
    LITTLE_ENDIAN = "<"
    BIG_ENDIAN = ">"


# The third line of a PFM header is a scale factor, whose sign tells the endianness
_PFM_SCALE = {
    Endianness.LITTLE_ENDIAN: "-1.0",
    Endianness.BIG_ENDIAN: "1.0",
}

# Lines in a PPM file should not be longer than this
PPM_MAX_LINE_LENGTH = 70


class InvalidImageFormat(Exception):
    """Raised when an image file cannot be decoded"""

    def __init__(self, error_message):
        super().__init__(error_message)


def _row_format(width: int, endianness: Endianness) -> str:
    # Three single-precision floats per pixel
    return f"{endianness.value}{3 * width}f"


def _tone_map(x: float) -> float:
    return x / (1 + x)


class Canvas:
    """A 2D grid of colors

    `width` and `height` give the number of columns and rows; `pixels` stores the colors row by
    row in a flat list. Pixels are addressed as `(x, y)`, with `(0, 0)` being the top-left corner.
    Colors are stored as they are, and they are clamped only when the image is saved.
    """

    def __init__(self, width=0, height=0):
        """Create a black image with the specified resolution"""
        self.width = width
        self.height = height
        self.pixels = [Color() for _ in range(width * height)]

    def valid_coordinates(self, x, y):
        return 0 <= x < self.width and 0 <= y < self.height

    def pixel_offset(self, x, y):
        """Return the position in `pixels` of the pixel in column `x` and row `y`"""
        return y * self.width + x

    def get_pixel(self, x, y) -> Color:
        assert self.valid_coordinates(x, y), f"pixel ({x}, {y}) is outside a {self.width}×{self.height} image"
        return self.pixels[self.pixel_offset(x, y)]

    def set_pixel(self, x, y, new_color: Color):
        assert self.valid_coordinates(x, y), f"pixel ({x}, {y}) is outside a {self.width}×{self.height} image"
        self.pixels[self.pixel_offset(x, y)] = new_color

    def set_column(self, x, colors: List[Color]):
        """Set the colors of all the pixels in column `x`, from top to bottom"""
        assert len(colors) == self.height
        for y, color in enumerate(colors):
            self.set_pixel(x, y, color)

    def row(self, y) -> List[Color]:
        start = self.pixel_offset(0, y)
        return self.pixels[start:start + self.width]

    def write_ppm(self, stream):
        """Write the image in a plain-text PPM file (P3)

        The `stream` parameter must be a text stream. Color components are scaled to
        [0, 255] and clamped. Each row of the image starts on a new line, and no line
        is longer than `PPM_MAX_LINE_LENGTH` characters."""
        stream.write(f"P3\n{self.width} {self.height}\n255\n")

        for y in range(self.height):
            values = " ".join(str(value) for color in self.row(y) for value in color.to_rgb8())
            for line in textwrap.wrap(values, width=PPM_MAX_LINE_LENGTH):
                stream.write(line + "\n")

    def write_pfm(self, stream, endianness=Endianness.LITTLE_ENDIAN):
        """Write the image in a binary PFM file

        Rows are saved from the bottom to the top of the image, as the format requires."""
        stream.write(f"PF\n{self.width} {self.height}\n{_PFM_SCALE[endianness]}\n".encode("ascii"))

        row_format = _row_format(self.width, endianness)
        for y in reversed(range(self.height)):
            stream.write(struct.pack(row_format, *[c for color in self.row(y) for c in (color.r, color.g, color.b)]))

    def average_luminosity(self, delta=1e-10):
        """Return the logarithmic average of the luminosity of the pixels

        The `delta` parameter prevents the logarithm from diverging on black pixels."""
        log_sum = sum(math.log10(delta + pixel.luminosity()) for pixel in self.pixels)
        return 10 ** (log_sum / len(self.pixels))

    def normalize_image(self, factor, luminosity=None):
        """Scale all the pixels so that the average luminosity becomes `factor`

        If `luminosity` is ``None``, it is computed with :meth:`.Canvas.average_luminosity`."""
        if not luminosity:
            luminosity = self.average_luminosity()

        self.pixels = [pixel * (factor / luminosity) for pixel in self.pixels]

    def clamp_image(self):
        """Squeeze every component into [0, 1) with the map x → x / (1 + x)"""
        self.pixels = [Color(_tone_map(p.r), _tone_map(p.g), _tone_map(p.b)) for p in self.pixels]

    def write_ldr_image(self, stream, format, gamma=1.0):
        """Save the image in a LDR format (PNG, JPEG, …)

        Components outside the range [0, 1] are clamped. Use ``Canvas.normalize_image`` and
        ``Canvas.clamp_image`` before calling this method to apply tone mapping to HDR images.
        """
        from PIL import Image
        img = Image.new("RGB", (self.width, self.height))
        img.putdata([pixel.to_rgb8(gamma=gamma) for pixel in self.pixels])
        img.save(stream, format=format)


def _read_ascii_line(stream) -> str:
    """Read bytes up to the next newline (excluded) or to the end of the stream"""
    chars = []
    for byte in iter(lambda: stream.read(1), b""):
        if byte == b"\n":
            break
        chars.append(byte)

    return b"".join(chars).decode("ascii")


def _pfm_size(line: str):
    try:
        width, height = (int(x) for x in line.split(" "))
    except ValueError:
        raise InvalidImageFormat(f"invalid image size specification «{line}»")

    if width < 0 or height < 0:
        raise InvalidImageFormat(f"negative width/height in «{line}»")

    return width, height


def _pfm_endianness(line: str) -> Endianness:
    try:
        scale = float(line)
    except ValueError:
        raise InvalidImageFormat("missing endianness specification")

    for endianness, value in _PFM_SCALE.items():
        if scale == float(value):
            return endianness

    raise InvalidImageFormat(f"invalid endianness specification «{line}»")


def read_pfm_image(stream):
    """Read a PFM image from a binary stream

    Return a ``Canvas`` object containing the image. If an error occurs, raise a
    ``InvalidImageFormat`` exception."""
    if _read_ascii_line(stream) != "PF":
        raise InvalidImageFormat("invalid magic in PFM file")

    width, height = _pfm_size(_read_ascii_line(stream))
    row_format = _row_format(width, _pfm_endianness(_read_ascii_line(stream)))
    row_size = struct.calcsize(row_format)

    result = Canvas(width=width, height=height)
    for y in reversed(range(height)):
        try:
            values = struct.unpack(row_format, stream.read(row_size))
        except struct.error:
            raise InvalidImageFormat(f"truncated PFM file, row {y} is missing")

        for x in range(width):
            result.set_pixel(x, y, Color(*values[3 * x:3 * x + 3]))

    return result


def _ppm_tokens(stream):
    for line in stream:
        # Everything after a '#' is a comment
        yield from line.split("#", 1)[0].split()


def read_ppm_image(stream):
    """Read a plain-text PPM image (P3) from a text stream

    Color components are divided by the maximum value declared in the header, so that
    they fall in [0, 1]. If an error occurs, raise a ``InvalidImageFormat`` exception."""
    tokens = _ppm_tokens(stream)

    magic = next(tokens, None)
    if magic != "P3":
        raise InvalidImageFormat(f"invalid magic in PPM file: {magic}")

    try:
        width, height, max_value = [int(next(tokens)) for _ in range(3)]
    except (StopIteration, ValueError):
        raise InvalidImageFormat("invalid PPM header")

    if width < 0 or height < 0 or max_value <= 0:
        raise InvalidImageFormat("invalid width/height/maximum value in PPM header")

    result = Canvas(width=width, height=height)
    for y in range(height):
        for x in range(width):
            try:
                r, g, b = [int(next(tokens)) / max_value for _ in range(3)]
            except (StopIteration, ValueError):
                raise InvalidImageFormat(f"invalid or missing color for pixel ({x}, {y})")

            result.set_pixel(x, y, Color(r, g, b))

    return result


def read_ldr_image(stream):
    """Read an image in a format supported by Pillow (PNG, JPEG, …) from a binary stream"""
    from PIL import Image, UnidentifiedImageError

    try:
        img = Image.open(stream).convert("RGB")
    except UnidentifiedImageError as err:
        raise InvalidImageFormat(f"unsupported image format: {err}")

    result = Canvas(width=img.width, height=img.height)
    result.pixels = [Color(r / 255, g / 255, b / 255) for (r, g, b) in img.getdata()]
    return result


def read_image(path) -> Canvas:
    """Read an image from a file, choosing the format from its extension"""
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".ppm":
        with path.open("rt") as inpf:
            return read_ppm_image(inpf)
    elif suffix == ".pfm":
        with path.open("rb") as inpf:
            return read_pfm_image(inpf)

    with path.open("rb") as inpf:
        return read_ldr_image(inpf)
