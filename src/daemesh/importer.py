"""COLLADA document walking: <library_geometries> to a single welded Mesh."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from daemesh.errors import FileAccessError, ParseError
from daemesh.mesh import Mesh
from daemesh.sources import (
    InputSet,
    SourceTable,
    VerticesAlias,
    parse_index_array,
    parse_inputs,
    parse_source_table,
    parse_vertices_alias,
)
from daemesh.warning_policy import WarningPolicy, emit_warning
from daemesh.welder import Corner, fan_triangulate, split_corners, weld


@dataclass(frozen=True)
class ImportOptions:
    """Knobs for DAE import."""

    triangulate_polylists: bool = False
    warning_policy: WarningPolicy | None = None


def import_dae(path: str | Path, *, options: ImportOptions | None = None) -> Mesh:
    """Import a COLLADA file into a single indexed triangle mesh.

    Args:
        path: Path to a .dae file.
        options: Import options; defaults to ``ImportOptions()``.

    Returns:
        A new Mesh aggregating every <geometry>/<mesh> in document order.

    Raises:
        FileAccessError: If the file cannot be read.
        ParseError: On malformed XML or unusable primitive structure.
        SourceError: On a malformed <source>.
        UnresolvedSourceError: On a dangling source reference.
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise FileAccessError(f"Cannot read file: {e}") from e
    return parse_dae(data, options=options)


def parse_dae(text: str | bytes, *, options: ImportOptions | None = None) -> Mesh:
    """Parse an in-memory COLLADA document. See ``import_dae``."""
    options = options or ImportOptions()
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ParseError(f"Invalid XML: {e}") from e
    _strip_namespaces(root)

    parts: list[Mesh] = []
    for geometry in root.findall("library_geometries/geometry"):
        mesh_elem = geometry.find("mesh")
        if mesh_elem is None:
            continue
        parts.extend(_read_mesh(mesh_elem, geometry.get("id", ""), options))

    return _aggregate(parts, _read_comment(root), options.warning_policy)


def _strip_namespaces(root: ET.Element) -> None:
    """Drop ``{namespace}`` prefixes from every tag in place."""
    for elem in root.iter():
        if elem.tag.startswith("{"):
            elem.tag = elem.tag.split("}", 1)[1]


def _read_comment(root: ET.Element) -> str:
    comments = root.find("asset/contributor/comments")
    if comments is None or comments.text is None:
        return ""
    return comments.text


def _read_mesh(mesh_elem: ET.Element, geometry_id: str, options: ImportOptions) -> list[Mesh]:
    """Weld the primitive sets of one <mesh> element."""
    sources = parse_source_table(mesh_elem)
    vertices = parse_vertices_alias(mesh_elem)
    parts: list[Mesh] = []

    triangles = mesh_elem.findall("triangles")
    if len(triangles) > 1:
        emit_warning(
            "W02",
            f"Geometry {geometry_id!r} has {len(triangles)} <triangles> elements; "
            "only the first is imported",
            policy=options.warning_policy,
        )
    if triangles:
        parts.append(_read_triangles(triangles[0], sources, vertices))

    for polylist in mesh_elem.findall("polylist"):
        part = _read_polylist(polylist, geometry_id, sources, vertices, options)
        if part is not None:
            parts.append(part)

    return parts


def _require_vertex_input(input_set: InputSet, corners: list[Corner], tag: str) -> None:
    if corners and not input_set.has_vertices:
        raise ParseError(f"<{tag}> has no VERTEX input")


def _read_triangles(
    elem: ET.Element, sources: SourceTable, vertices: VerticesAlias
) -> Mesh:
    input_set = parse_inputs(elem)
    corners = split_corners(input_set, parse_index_array(elem.find("p")))
    if len(corners) % 3 != 0:
        raise ParseError(f"<triangles> holds {len(corners)} corners, not a multiple of 3")
    _require_vertex_input(input_set, corners, "triangles")
    return weld(input_set, corners, sources, vertices)


def _read_polylist(
    elem: ET.Element,
    geometry_id: str,
    sources: SourceTable,
    vertices: VerticesAlias,
    options: ImportOptions,
) -> Mesh | None:
    """Parse a <polylist>; weld its fan triangulation only when enabled."""
    input_set = parse_inputs(elem)
    vcount = parse_index_array(elem.find("vcount"), "<vcount>")
    corners = split_corners(input_set, parse_index_array(elem.find("p")))
    if sum(vcount) != len(corners):
        raise ParseError(
            f"<polylist> <vcount> totals {sum(vcount)} corners but <p> holds {len(corners)}"
        )

    if not options.triangulate_polylists:
        emit_warning(
            "W01",
            f"Geometry {geometry_id!r}: <polylist> with {len(vcount)} polygons "
            "was not imported (polylist triangulation is disabled)",
            policy=options.warning_policy,
        )
        return None

    _require_vertex_input(input_set, corners, "polylist")
    triangle_corners: list[Corner] = []
    start = 0
    for n in vcount:
        triangle_corners.extend(fan_triangulate(corners[start : start + n]))
        start += n
    return weld(input_set, triangle_corners, sources, vertices)


def _aggregate(parts: list[Mesh], comment: str, policy: WarningPolicy | None) -> Mesh:
    """Concatenate welded parts, keeping attribute arrays coherent with positions."""
    parts = [p for p in parts if p.vertex_count]
    keep_normals = _attribute_is_coherent(parts, "normals", policy)
    keep_texcoords = _attribute_is_coherent(parts, "texcoords", policy)

    mesh = Mesh(comment=comment)
    for part in parts:
        if not keep_normals:
            part.normals = np.zeros((0, 3), dtype=np.float64)
        if not keep_texcoords:
            part.texcoords = np.zeros((0, 2), dtype=np.float64)
        mesh.append(part)
    return mesh


def _attribute_is_coherent(parts: list[Mesh], attr: str, policy: WarningPolicy | None) -> bool:
    present = [len(getattr(p, attr)) > 0 for p in parts]
    if any(present) and not all(present):
        emit_warning(
            "W03",
            f"{attr} present in {present.count(True)} of {len(parts)} primitive sets; "
            f"dropping {attr} from the imported mesh",
            policy=policy,
        )
        return False
    return True
