"""Shared DAE fixtures."""

import pytest

COLLADA_HEADER = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<COLLADA xmlns="http://www.collada.org/2005/11/COLLADASchema" version="1.4.1">\n'
)


def dae_document(*meshes: str, asset: str = "") -> str:
    """Wrap <mesh> bodies into a full COLLADA document, one <geometry> each."""
    geometries = "".join(
        f'<geometry id="G{i}"><mesh>{body}</mesh></geometry>' for i, body in enumerate(meshes)
    )
    return f"{COLLADA_HEADER}{asset}<library_geometries>{geometries}</library_geometries></COLLADA>"


def float_source(source_id: str, values: str, stride: int, count: int, offset: str = "") -> str:
    offset_attr = f' offset="{offset}"' if offset else ""
    return (
        f'<source id="{source_id}">'
        f'<float_array id="{source_id}-array" count="{len(values.split())}">{values}</float_array>'
        f'<technique_common><accessor source="#{source_id}-array" count="{count}" '
        f'stride="{stride}"{offset_attr}>'
        '<param name="X" type="float"/><param name="Y" type="float"/>'
        '<param name="Z" type="float"/>'
        "</accessor></technique_common></source>"
    )


TRIANGLE_POSITIONS = "0 0 0  1 0 0  0 1 0"
QUAD_POSITIONS = "0 0 0  1 0 0  0 1 0  1 1 0"


@pytest.fixture
def single_triangle_dae():
    """One triangle, positions only, VERTEX routed through <vertices>."""
    return dae_document(
        float_source("P", TRIANGLE_POSITIONS, 3, 3)
        + '<vertices id="V"><input semantic="POSITION" source="#P"/></vertices>'
        '<triangles count="1"><input semantic="VERTEX" source="#V" offset="0"/>'
        "<p>0 1 2</p></triangles>"
    )


@pytest.fixture
def shared_normal_dae():
    return dae_document(
        float_source("P", TRIANGLE_POSITIONS, 3, 3)
        + float_source("N", "0 0 1", 3, 1)
        + '<vertices id="V"><input semantic="POSITION" source="#P"/></vertices>'
        '<triangles count="1">'
        '<input semantic="VERTEX" source="#V" offset="0"/>'
        '<input semantic="NORMAL" source="#N" offset="1"/>'
        "<p>0 0 1 0 2 0</p></triangles>"
    )


@pytest.fixture
def shared_edge_dae():
    return dae_document(
        float_source("P", QUAD_POSITIONS, 3, 4)
        + float_source("N", "0 0 1", 3, 1)
        + '<vertices id="V"><input semantic="POSITION" source="#P"/></vertices>'
        '<triangles count="2">'
        '<input semantic="VERTEX" source="#V" offset="0"/>'
        '<input semantic="NORMAL" source="#N" offset="1"/>'
        "<p>0 0 1 0 2 0 2 0 1 0 3 0</p></triangles>"
    )


@pytest.fixture
def textured_dae():
    return dae_document(
        float_source("P", TRIANGLE_POSITIONS, 3, 3)
        + float_source("N", "0 0 1", 3, 1)
        + float_source("UV", "0 0  1 0  0 1", 2, 3)
        + '<vertices id="V"><input semantic="POSITION" source="#P"/></vertices>'
        '<triangles count="1">'
        '<input semantic="VERTEX" source="#V" offset="0"/>'
        '<input semantic="NORMAL" source="#N" offset="1"/>'
        '<input semantic="TEXCOORD" source="#UV" offset="2" set="0"/>'
        "<p>0 0 0 1 0 1 2 0 2</p></triangles>"
    )


@pytest.fixture
def quad_polylist_dae():
    """A single quad as a <polylist>, positions only."""
    return dae_document(
        float_source("P", QUAD_POSITIONS, 3, 4)
        + '<vertices id="V"><input semantic="POSITION" source="#P"/></vertices>'
        '<polylist count="1"><input semantic="VERTEX" source="#V" offset="0"/>'
        "<vcount>4</vcount><p>0 1 3 2</p></polylist>"
    )
