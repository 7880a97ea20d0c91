#!/usr/bin/env python3

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

from dataclasses import dataclass
from math import pi
from pathlib import Path
from time import perf_counter
import sys

import click

from pywhitted.camera import Camera
from pywhitted.canvas import Canvas, InvalidImageFormat, read_image
from pywhitted.colors import Color
from pywhitted.geometry import Point, Vec
from pywhitted.groups import construct_bvh
from pywhitted.imagetracer import ImageTracer
from pywhitted.lights import PointLight
from pywhitted.materials import Material
from pywhitted.obj_file import ObjFileError, parse_obj
from pywhitted.pcg import PCG
from pywhitted.scene_file import Scene, SceneError, load_scene
from pywhitted.shapes import Plane
from pywhitted.transformations import view_transform
from pywhitted.world import World

OUTPUT_FORMATS = ["ppm", "pfm", "png"]
INPUT_TYPES = ["scene", "obj"]


@dataclass
class Parameters:
    """Options of the `render` command"""
    input_file_name: str = ""
    input_type: str = "scene"
    output_file_name: str = ""
    output_format: str = ""
    width: int = 0
    height: int = 0
    parallel: bool = True
    workers: int = 0
    bvh_threshold: int = 4
    init_state: int = 45
    init_seq: int = 54

    def resolved_output_format(self) -> str:
        """Return the output format, guessing it from the output file name if it was not given"""
        if self.output_format:
            return self.output_format

        suffix = Path(self.output_file_name).suffix.lower().lstrip(".")
        return suffix if suffix in OUTPUT_FORMATS else "ppm"


def obj_scene(file_name: str, width: int, height: int) -> Scene:
    """Build a scene showing the mesh in an OBJ file on a floor, lit by a white point light"""
    with open(file_name, "rt") as inpf:
        obj = parse_obj(inpf)

    if obj.ignored_lines:
        click.echo(f"{obj.ignored_lines} line(s) in {file_name} were ignored", err=True)

    world = World(light=PointLight(position=Point(-10.0, 10.0, -10.0), intensity=Color(1.0, 1.0, 1.0)))
    world.add_shape(obj.to_group())
    world.add_shape(Plane(material=Material(color=Color(0.9, 0.9, 0.9), specular=0.0)))

    camera = Camera(
        hsize=width or 320,
        vsize=height or 240,
        field_of_view=pi / 3,
        transformation=view_transform(Point(0.0, 2.5, -8.0), Point(0.0, 1.0, 0.0), Vec(0.0, 1.0, 0.0)),
    )
    return Scene(world=world, camera=camera)


def save_canvas(image: Canvas, file_name: str, output_format: str, gamma: float = 1.0):
    """Save the image; `output_format` is "ppm", "pfm", or any format supported by Pillow"""
    if output_format == "ppm":
        with open(file_name, "wt") as outf:
            image.write_ppm(outf)
    elif output_format == "pfm":
        with open(file_name, "wb") as outf:
            image.write_pfm(outf)
    else:
        with open(file_name, "wb") as outf:
            pil_format = "JPEG" if output_format in ("jpg", "jpeg") else output_format.upper()
            image.write_ldr_image(outf, pil_format, gamma=gamma)


def render_scene(params: Parameters):
    pcg = PCG(init_state=params.init_state, init_seq=params.init_seq)

    try:
        if params.input_type == "obj":
            scene = obj_scene(params.input_file_name, params.width, params.height)
        else:
            scene = load_scene(params.input_file_name, pcg=pcg)
    except (SceneError, ObjFileError) as err:
        click.echo(f"{params.input_file_name}: {err}", err=True)
        sys.exit(1)
    except OSError as err:
        click.echo(f"unable to read {params.input_file_name}: {err}", err=True)
        sys.exit(1)

    if not scene.camera:
        click.echo(f"{params.input_file_name}: the scene has no camera", err=True)
        sys.exit(1)

    camera = scene.camera
    if params.width or params.height:
        camera = Camera(hsize=params.width or camera.hsize,
                        vsize=params.height or camera.vsize,
                        field_of_view=camera.field_of_view,
                        transformation=camera.transformation)

    for shape in scene.world.shapes:
        construct_bvh(shape, params.bvh_threshold)

    image = Canvas(camera.hsize, camera.vsize)
    click.echo(f"Generating a {image.width}×{image.height} image", err=True)

    def print_progress(col):
        click.echo(f"Rendered {col}/{image.width} columns\r", nl=False, err=True)

    tracer = ImageTracer(image=image, camera=camera)
    start_time = perf_counter()
    tracer.fire_all_rays(
        scene.world,
        callback=print_progress,
        parallel=params.parallel,
        max_workers=params.workers or None,
        pcg=pcg,
    )
    elapsed_time = perf_counter() - start_time
    click.echo(f"\nRendering completed in {elapsed_time:.1f} s", err=True)

    output_format = params.resolved_output_format()
    save_canvas(image, params.output_file_name, output_format)
    click.echo(f"Image written to {params.output_file_name}", err=True)


@click.group()
def cli():
    pass


@click.command("render")
@click.option("--type", "input_type", type=click.Choice(INPUT_TYPES), default="scene",
              help="Kind of input file: a YAML scene or an OBJ mesh")
@click.option("--output", "-o", type=str, default="output.ppm", help="Name of the image file to create")
@click.option("--format", "output_format", type=click.Choice(OUTPUT_FORMATS), default=None,
              help="Format of the image (default: guessed from the name of the output file)")
@click.option("--width", type=int, default=0, help="Width of the image (overrides the scene)")
@click.option("--height", type=int, default=0, help="Height of the image (overrides the scene)")
@click.option("--parallel/--serial", default=True, help="Render columns in parallel threads")
@click.option("--workers", type=int, default=0, help="Number of threads (default: chosen by Python)")
@click.option(
    "--bvh-threshold",
    type=int,
    default=4,
    help="Maximum number of children a group can have before it is split in subgroups",
)
@click.option(
    "--init-state",
    type=int,
    help="Initial seed for the random number generator (positive number).",
    default=45,
)
@click.option(
    "--init-seq",
    type=int,
    help="Identifier of the sequence produced by the random number generator (positive number).",
    default=54
)
@click.argument("input_file_name", type=str)
def render(input_type, output, output_format, width, height, parallel, workers, bvh_threshold, init_state,
           init_seq, input_file_name):
    """Render a YAML scene or an OBJ mesh"""
    render_scene(Parameters(
        input_file_name=input_file_name,
        input_type=input_type,
        output_file_name=output,
        output_format=output_format or "",
        width=width,
        height=height,
        parallel=parallel,
        workers=workers,
        bvh_threshold=bvh_threshold,
        init_state=init_state,
        init_seq=init_seq,
    ))


@click.command("convert")
@click.option("--factor", type=float, default=None,
              help="Multiplicative factor for tone mapping (default: no tone mapping)")
@click.option("--gamma", type=float, default=1.0, help="Exponent for gamma-correction")
@click.option("--luminosity", type=float, default=None, help="Average luminosity")
@click.argument("input_file_name", type=str)
@click.argument("output_file_name", type=str)
def convert(factor, gamma, luminosity, input_file_name, output_file_name):
    """Convert an image (PPM, PFM, PNG, …) into another format"""
    try:
        img = read_image(input_file_name)
    except (OSError, InvalidImageFormat) as err:
        click.echo(f"unable to read {input_file_name}: {err}", err=True)
        sys.exit(1)

    click.echo(f"File {input_file_name} has been read from disk.", err=True)

    if factor is not None:
        img.normalize_image(factor=factor, luminosity=luminosity)
        img.clamp_image()

    suffix = Path(output_file_name).suffix.lower().lstrip(".")
    save_canvas(img, output_file_name, suffix or "png", gamma=gamma)

    click.echo(f"File {output_file_name} has been written to disk.", err=True)


cli.add_command(render)
cli.add_command(convert)

if __name__ == "__main__":
    cli()
