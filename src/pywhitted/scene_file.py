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

from copy import deepcopy
from dataclasses import dataclass, field
from math import inf
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from pywhitted.camera import Camera
from pywhitted.canvas import InvalidImageFormat, read_image
from pywhitted.colors import Color, WHITE
from pywhitted.csg import CSG, CsgOperation
from pywhitted.geometry import Point, Vec
from pywhitted.groups import Group
from pywhitted.lights import PointLight, AreaLight
from pywhitted.materials import Material
from pywhitted.obj_file import ObjFileError, parse_obj
from pywhitted.patterns import (
    Pattern,
    StripePattern,
    GradientPattern,
    RingPattern,
    CheckersPattern,
    BlendedPattern,
    TextureMapPattern,
    CubeMapPattern,
    UVPattern,
    UVCheckers,
    UVAlignCheck,
    UVImage,
    CUBE_FACES,
    spherical_map,
    planar_map,
    cylindrical_map,
)
from pywhitted.pcg import PCG
from pywhitted.shapes import Shape, Sphere, Plane, Cube, Cylinder, Cone, ShapeHierarchyError
from pywhitted.transformations import (
    Transformation,
    SingularMatrixError,
    translation,
    scaling,
    rotation_x,
    rotation_y,
    rotation_z,
    shearing,
    view_transform,
)
from pywhitted.world import World


class SceneError(Exception):
    """An error found while reading a scene file

    The fields of this type are the following:

    - `message`: a user-friendly error message
    - `command_num`: the number of the command where the error was discovered (starting from 1),
      or 0 if the error is not related to any command
    """

    def __init__(self, message: str, command_num: int = 0):
        super().__init__(f"command #{command_num}: {message}" if command_num else message)
        self.message = message
        self.command_num = command_num


@dataclass
class Scene:
    """A scene read from a scene file"""
    world: World = field(default_factory=World)
    camera: Union[Camera, None] = None


########################################################################################
# Macro expansion


def _is_transform_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(x, list) for x in value)


def _substitute(value: Any, definitions: Dict[str, Any]) -> Any:
    """Replace every string matching a definition with a copy of its value

    Within lists, a definition holding a list of transforms is spliced in place."""
    if isinstance(value, dict):
        return {key: _substitute(item, definitions) for (key, item) in value.items()}
    elif isinstance(value, list):
        result = []
        for item in value:
            if isinstance(item, str) and item in definitions and _is_transform_list(definitions[item]):
                result.extend(deepcopy(definitions[item]))
            else:
                result.append(_substitute(item, definitions))
        return result
    elif isinstance(value, str) and value in definitions:
        return deepcopy(definitions[value])

    return value


def _expand(commands: List[Any]):
    """Yield the number and the expanded content of each command that is not a `define`"""
    definitions: Dict[str, Any] = {}

    for command_num, command in enumerate(commands, start=1):
        if not isinstance(command, dict):
            raise SceneError("every command must be a mapping", command_num)

        if "define" not in command:
            yield command_num, _substitute(command, definitions)
            continue

        name = command["define"]
        value = _substitute(command.get("value"), definitions)

        if "extend" in command:
            base = definitions.get(command["extend"])
            if not isinstance(base, dict) or not isinstance(value, dict):
                raise SceneError(f"«{name}» can only extend a mapping defined before", command_num)

            merged = deepcopy(base)
            merged.update(value)
            value = merged

        definitions[name] = value


def expand_definitions(commands: List[Any]) -> List[Dict[str, Any]]:
    """Resolve the `define` commands and return the remaining commands

    A `define` command associates the name in `define` with the content of `value`; if `extend`
    names a previous definition (a mapping), `value` is merged on top of it. Definitions can use
    the ones that precede them."""
    return [command for (_, command) in _expand(commands)]


########################################################################################
# Basic values


def expect_number(value: Any, what: str) -> float:
    """Check that `value` is a number and return it as a float"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SceneError(f"{what} must be a number, got «{value}»")

    return float(value)


def expect_count(value: Any, what: str) -> int:
    """Check that `value` is a positive integer"""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise SceneError(f"{what} must be a positive integer, got «{value}»")

    return value


def expect_triple(value: Any, what: str) -> List[float]:
    """Check that `value` is a list of three numbers"""
    if not isinstance(value, list) or len(value) != 3:
        raise SceneError(f"{what} must be a list of three numbers, got «{value}»")

    return [expect_number(x, what) for x in value]


def expect_color(value: Any, what: str = "color") -> Color:
    return Color(*expect_triple(value, what))


def expect_point(value: Any, what: str) -> Point:
    return Point(*expect_triple(value, what))


def expect_vec(value: Any, what: str) -> Vec:
    return Vec(*expect_triple(value, what))


def expect_key(data: Dict[str, Any], *keys: str) -> Any:
    """Return the value associated with the first of `keys` found in `data`"""
    for key in keys:
        if key in data:
            return data[key]

    raise SceneError(f"missing key «{keys[0]}»")


########################################################################################
# Transformations, patterns, and materials


def _transform_args(op: List[Any], count: int) -> List[float]:
    if len(op) != count + 1:
        raise SceneError(f"«{op[0]}» needs {count} argument(s), got {len(op) - 1}")

    return [expect_number(x, op[0]) for x in op[1:]]


def parse_transform(ops: Any) -> Transformation:
    """Build a transformation from a list like ``[[scale, 2, 2, 2], [translate, 0, 1, 0]]``

    The operations are applied in the same order as they appear in the list. Angles are in radians."""
    if not isinstance(ops, list):
        raise SceneError(f"a transform must be a list of operations, got «{ops}»")

    result = Transformation()
    for op in ops:
        if not isinstance(op, list) or not op:
            raise SceneError(f"invalid transform operation «{op}»")

        name = op[0]
        if name == "translate":
            t = translation(Vec(*_transform_args(op, 3)))
        elif name == "scale":
            t = scaling(Vec(*_transform_args(op, 3)))
        elif name == "rotate-x":
            t = rotation_x(*_transform_args(op, 1))
        elif name == "rotate-y":
            t = rotation_y(*_transform_args(op, 1))
        elif name == "rotate-z":
            t = rotation_z(*_transform_args(op, 1))
        elif name == "shear":
            t = shearing(*_transform_args(op, 6))
        else:
            raise SceneError(f"unknown transform operation «{name}»")

        result = t * result

    return result


def _two_colors(data: Dict[str, Any]) -> List[Color]:
    colors = data.get("colors")
    if not isinstance(colors, list) or len(colors) != 2:
        raise SceneError(f"pattern «{data.get('type')}» needs a list of two colors")

    return [expect_color(x) for x in colors]


def parse_uv_pattern(data: Any, base_dir: Path) -> UVPattern:
    """Build a 2D texture for a texture map"""
    if not isinstance(data, dict):
        raise SceneError(f"invalid UV pattern «{data}»")

    kind = data.get("type")
    if kind == "checkers":
        color_a, color_b = _two_colors(data)
        return UVCheckers(
            width=int(expect_number(data.get("width"), "width")),
            height=int(expect_number(data.get("height"), "height")),
            color_a=color_a,
            color_b=color_b,
        )
    elif kind == "align_check":
        colors = data.get("colors")
        if not isinstance(colors, dict):
            raise SceneError("«align_check» needs a mapping of colors (main, ul, ur, bl, br)")

        return UVAlignCheck(
            main=expect_color(expect_key(colors, "main"), "main"),
            upper_left=expect_color(expect_key(colors, "ul"), "ul"),
            upper_right=expect_color(expect_key(colors, "ur"), "ur"),
            bottom_left=expect_color(expect_key(colors, "bl"), "bl"),
            bottom_right=expect_color(expect_key(colors, "br"), "br"),
        )
    elif kind == "image":
        file_name = expect_key(data, "file")
        try:
            return UVImage(read_image(base_dir / file_name))
        except (OSError, InvalidImageFormat) as err:
            raise SceneError(f"unable to load texture «{file_name}»: {err}")

    raise SceneError(f"unknown UV pattern type «{kind}»")


_MAPPINGS = {
    "spherical": spherical_map,
    "planar": planar_map,
    "cylindrical": cylindrical_map,
}


def parse_pattern(data: Any, base_dir: Path) -> Pattern:
    """Build a :class:`.Pattern` from its description"""
    if not isinstance(data, dict):
        raise SceneError(f"invalid pattern «{data}»")

    kind = data.get("type")
    transformation = parse_transform(data.get("transform", []))

    if kind in ("stripes", "gradient", "rings", "checkers"):
        color_a, color_b = _two_colors(data)
        pattern_class = {
            "stripes": StripePattern,
            "gradient": GradientPattern,
            "rings": RingPattern,
            "checkers": CheckersPattern,
        }[kind]
        return pattern_class(color_a, color_b, transformation)
    elif kind == "blended":
        patterns = data.get("patterns")
        if not isinstance(patterns, list) or len(patterns) != 2:
            raise SceneError("«blended» needs a list of two patterns")

        return BlendedPattern(parse_pattern(patterns[0], base_dir), parse_pattern(patterns[1], base_dir),
                              transformation)
    elif kind == "map":
        mapping = data.get("mapping")
        if mapping == "cube":
            faces = {face: parse_uv_pattern(expect_key(data, face), base_dir) for face in CUBE_FACES}
            return CubeMapPattern(transformation=transformation, **faces)
        elif mapping in _MAPPINGS:
            return TextureMapPattern(parse_uv_pattern(expect_key(data, "uv_pattern"), base_dir),
                                     _MAPPINGS[mapping], transformation)

        raise SceneError(f"unknown texture mapping «{mapping}»")

    raise SceneError(f"unknown pattern type «{kind}»")


_MATERIAL_SCALARS = ["ambient", "diffuse", "specular", "shininess", "reflective", "transparency"]


def parse_material(data: Any, base_dir: Path) -> Material:
    """Build a :class:`.Material`; missing properties keep their default value"""
    if not isinstance(data, dict):
        raise SceneError(f"invalid material «{data}»")

    material = Material()
    if "color" in data:
        material.color = expect_color(data["color"])

    if "pattern" in data:
        material.pattern = parse_pattern(data["pattern"], base_dir)

    for key in _MATERIAL_SCALARS:
        if key in data:
            setattr(material, key, expect_number(data[key], key))

    for key in ("refractive_index", "refractive-index"):
        if key in data:
            material.refractive_index = expect_number(data[key], key)

    return material


########################################################################################
# Shapes, lights, and the camera


def _bounds(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "minimum": expect_number(data["min"], "min") if "min" in data else -inf,
        "maximum": expect_number(data["max"], "max") if "max" in data else inf,
        "closed": bool(data.get("closed", False)),
    }


def _children(data: Dict[str, Any], key: str, base_dir: Path) -> List[Shape]:
    children = data.get(key, [])
    if not isinstance(children, list):
        raise SceneError(f"«{key}» must be a list of shapes")

    return [parse_shape(child, base_dir) for child in children]


_CSG_OPERATIONS = {
    "union": CsgOperation.UNION,
    "intersect": CsgOperation.INTERSECT,
    "intersection": CsgOperation.INTERSECT,
    "difference": CsgOperation.DIFFERENCE,
}


def parse_shape(data: Any, base_dir: Path) -> Shape:
    """Build a shape from a command like ``{add: sphere, material: ..., transform: ...}``"""
    if not isinstance(data, dict):
        raise SceneError(f"invalid shape «{data}»")

    kind = data.get("add")
    transformation = parse_transform(data.get("transform", []))
    material = parse_material(data["material"], base_dir) if "material" in data else None
    casts_shadow = bool(data.get("shadow", True))
    common = dict(transformation=transformation, material=material, casts_shadow=casts_shadow)

    if kind == "sphere":
        return Sphere(**common)
    elif kind == "plane":
        return Plane(**common)
    elif kind == "cube":
        return Cube(**common)
    elif kind == "cylinder":
        return Cylinder(**common, **_bounds(data))
    elif kind == "cone":
        return Cone(**common, **_bounds(data))
    elif kind == "group":
        return Group(children=_children(data, "children", base_dir), **common)
    elif kind == "csg":
        operation = _CSG_OPERATIONS.get(data.get("operation"))
        if operation is None:
            raise SceneError(f"unknown CSG operation «{data.get('operation')}»")

        return CSG(operation, parse_shape(expect_key(data, "left"), base_dir),
                   parse_shape(expect_key(data, "right"), base_dir), **common)
    elif kind == "obj":
        return _load_obj(data, base_dir, common)

    raise SceneError(f"unknown shape «{kind}»")


def _load_obj(data: Dict[str, Any], base_dir: Path, common: Dict[str, Any]) -> Group:
    file_name = expect_key(data, "file")
    try:
        with open(base_dir / file_name, "rt") as inpf:
            obj = parse_obj(inpf)
    except OSError as err:
        raise SceneError(f"unable to read «{file_name}»: {err}")
    except ObjFileError as err:
        raise SceneError(f"error in «{file_name}»: {err}")

    # The material of the mesh is shared by all its triangles
    if common["material"] is not None:
        for triangle in obj.triangles:
            triangle.material = common["material"]

    result = obj.to_group()
    result.transformation = common["transformation"]
    result.casts_shadow = common["casts_shadow"]
    return result


def parse_light(data: Dict[str, Any], pcg: Optional[PCG] = None) -> Union[PointLight, AreaLight]:
    """Build a point light (if `at` is present) or an area light"""
    intensity = expect_color(data["intensity"], "intensity") if "intensity" in data else WHITE

    if "at" in data:
        return PointLight(position=expect_point(data["at"], "at"), intensity=intensity)

    return AreaLight(
        corner=expect_point(expect_key(data, "corner"), "corner"),
        full_uvec=expect_vec(expect_key(data, "uvec"), "uvec"),
        usteps=expect_count(expect_key(data, "usteps"), "usteps"),
        full_vvec=expect_vec(expect_key(data, "vvec"), "vvec"),
        vsteps=expect_count(expect_key(data, "vsteps"), "vsteps"),
        intensity=intensity,
        pcg=pcg,
    )


def parse_camera(data: Dict[str, Any]) -> Camera:
    """Build a camera; `from`, `to`, and `up` set its view transformation"""
    return Camera(
        hsize=int(expect_number(expect_key(data, "width"), "width")),
        vsize=int(expect_number(expect_key(data, "height"), "height")),
        field_of_view=expect_number(expect_key(data, "field-of-view", "field_of_view"), "field-of-view"),
        transformation=view_transform(
            origin=expect_point(expect_key(data, "from"), "from"),
            target=expect_point(expect_key(data, "to"), "to"),
            up=expect_vec(expect_key(data, "up"), "up"),
        ),
    )


def parse_scene(source, base_dir=None, pcg: Optional[PCG] = None) -> Scene:
    """Read a YAML scene description from a string or a text stream and return a :class:`.Scene` object

    Files referenced by the scene (OBJ meshes, textures) are looked for in `base_dir`, which defaults
    to the current directory. The generator `pcg` is passed to area lights. Only the first light is
    used; defining more than one camera is an error."""
    base_dir = Path(base_dir) if base_dir else Path(".")

    try:
        document = yaml.safe_load(source)
    except yaml.YAMLError as err:
        raise SceneError(f"invalid YAML: {err}")

    if document is None:
        document = []

    if not isinstance(document, list):
        raise SceneError("a scene must be a list of commands")

    scene = Scene()
    for command_num, command in _expand(document):
        kind = command.get("add")
        try:
            if kind == "camera":
                if scene.camera:
                    raise SceneError("You cannot define more than one camera")
                scene.camera = parse_camera(command)
            elif kind == "light":
                light = parse_light(command, pcg)
                if not scene.world.light:
                    scene.world.light = light
            else:
                scene.world.add_shape(parse_shape(command, base_dir))
        except SceneError as err:
            raise SceneError(err.message, command_num)
        except (ShapeHierarchyError, SingularMatrixError) as err:
            raise SceneError(str(err), command_num)

    return scene


def load_scene(file_name, pcg: Optional[PCG] = None) -> Scene:
    """Read a scene from a YAML file; other files are looked for in the same directory"""
    path = Path(file_name)
    with path.open("rt") as inpf:
        return parse_scene(inpf, base_dir=path.parent, pcg=pcg)
