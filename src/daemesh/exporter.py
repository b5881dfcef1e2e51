"""COLLADA 1.4.1 document assembly via xml.etree.ElementTree."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from daemesh.errors import ExportError, FileAccessError
from daemesh.mesh import Mesh

COLLADA_NAMESPACE = "http://www.collada.org/2005/11/COLLADASchema"
COLLADA_VERSION = "1.4.1"

# Characters outside the XML 1.0 Char production
_XML_ILLEGAL_CHARS = re.compile(
    "[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)


@dataclass(frozen=True)
class ExportOptions:
    """Knobs for DAE export. Element ids derive from ``geometry_id``."""

    authoring_tool: str = "daemesh"
    up_axis: str = "Z_UP"
    geometry_id: str = "Mesh-1"
    pretty: bool = True


def export_dae(
    mesh: Mesh,
    output_path: str | Path,
    *,
    options: ExportOptions | None = None,
) -> None:
    """Export a mesh to a COLLADA file.

    Raises:
        ValidationError: If the mesh indices are not a valid triangle list.
        ExportError: If the document cannot be serialized.
        FileAccessError: If the output file cannot be written.
    """
    data = render_dae(mesh, options=options)
    try:
        with open(output_path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise FileAccessError(f"Cannot write file: {e}") from e


def render_dae(mesh: Mesh, *, options: ExportOptions | None = None) -> bytes:
    """Serialize a mesh to COLLADA bytes (UTF-8, with XML declaration).

    Output is a pure function of the mesh and options.
    """
    options = options or ExportOptions()
    mesh.validate()
    root = build_document(mesh, options)
    try:
        if options.pretty:
            ET.indent(root)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)
    except Exception as e:
        raise ExportError(f"Failed to serialize DAE: {e}") from e


def build_document(mesh: Mesh, options: ExportOptions) -> ET.Element:
    """Build the <COLLADA> element tree for a mesh."""
    _check_xml_text(options.authoring_tool, "authoring tool")
    _check_xml_text(mesh.comment, "mesh comment")
    _check_xml_text(options.up_axis, "up axis")
    _check_xml_text(options.geometry_id, "geometry id")

    root = ET.Element("COLLADA", {"xmlns": COLLADA_NAMESPACE, "version": COLLADA_VERSION})

    asset = ET.SubElement(root, "asset")
    contributor = ET.SubElement(asset, "contributor")
    ET.SubElement(contributor, "authoring_tool").text = options.authoring_tool
    ET.SubElement(contributor, "comments").text = mesh.comment
    ET.SubElement(asset, "up_axis").text = options.up_axis

    library = ET.SubElement(root, "library_geometries")
    gid = options.geometry_id
    geometry = ET.SubElement(library, "geometry", {"id": gid, "name": gid})
    mesh_elem = ET.SubElement(geometry, "mesh")

    has_normals = mesh.has_normals
    has_texcoords = mesh.has_texcoords

    _add_source(mesh_elem, f"{gid}-positions", "position", mesh.positions, ("X", "Y", "Z"))
    if has_normals:
        _add_source(mesh_elem, f"{gid}-normals", "normal", mesh.normals, ("X", "Y", "Z"))
    if has_texcoords:
        _add_source(mesh_elem, f"{gid}-map1", "map1", mesh.texcoords, ("S", "T"))

    vertices = ET.SubElement(mesh_elem, "vertices", {"id": f"{gid}-vertices"})
    ET.SubElement(vertices, "input", {"semantic": "POSITION", "source": f"#{gid}-positions"})

    triangles = ET.SubElement(mesh_elem, "triangles", {"count": str(mesh.triangle_count)})
    inputs = [("VERTEX", f"#{gid}-vertices")]
    if has_normals:
        inputs.append(("NORMAL", f"#{gid}-normals"))
    if has_texcoords:
        inputs.append(("TEXCOORD", f"#{gid}-map1"))
    for offset, (semantic, source) in enumerate(inputs):
        attrib = {"offset": str(offset), "semantic": semantic, "source": source}
        if semantic == "TEXCOORD":
            attrib["set"] = "0"
        ET.SubElement(triangles, "input", attrib)

    # Attributes share the welded ordering, so one index addresses every input
    repeated = np.repeat(mesh.indices, len(inputs))
    ET.SubElement(triangles, "p").text = " ".join(str(v) for v in repeated.tolist())

    return root


def _add_source(
    mesh_elem: ET.Element,
    source_id: str,
    name: str,
    data: np.ndarray,
    params: tuple[str, ...],
) -> None:
    stride = len(params)
    values = data.reshape(-1).tolist()
    source = ET.SubElement(mesh_elem, "source", {"id": source_id, "name": name})
    float_array = ET.SubElement(
        source, "float_array", {"id": f"{source_id}-array", "count": str(len(values))}
    )
    float_array.text = " ".join(repr(float(v)) for v in values)

    technique = ET.SubElement(source, "technique_common")
    accessor = ET.SubElement(
        technique,
        "accessor",
        {
            "count": str(len(data)),
            "offset": "0",
            "source": f"#{source_id}-array",
            "stride": str(stride),
        },
    )
    for param in params:
        ET.SubElement(accessor, "param", {"name": param, "type": "float"})


def _check_xml_text(value: str, what: str) -> None:
    """Reject text that cannot appear in a well-formed XML 1.0 document."""
    match = _XML_ILLEGAL_CHARS.search(value)
    if match is not None:
        raise ExportError(
            f"Cannot serialize {what}: character {match.group()!r} at position "
            f"{match.start()} is not allowed in XML"
        )
