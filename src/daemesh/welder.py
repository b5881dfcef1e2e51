"""Index welding: interleaved COLLADA index streams to a single index buffer."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

from daemesh.errors import ParseError
from daemesh.mesh import Mesh
from daemesh.sources import InputSet, Semantic, SourceTable, VerticesAlias, resolve_source

# (vertex index, normal index, texcoord index) of one primitive corner
Corner = tuple[int, int, int]


@dataclass
class WeldCache:
    """Nested position -> normal -> texcoord -> unified index mapping."""

    _levels: dict[int, dict[int, dict[int, int]]] = field(default_factory=dict)

    def get(self, corner: Corner) -> int | None:
        vert, normal, texcoord = corner
        return self._levels.get(vert, {}).get(normal, {}).get(texcoord)

    def insert(self, corner: Corner, unified: int) -> None:
        vert, normal, texcoord = corner
        self._levels.setdefault(vert, {}).setdefault(normal, {})[texcoord] = unified


def split_corners(input_set: InputSet, stream: Sequence[int]) -> list[Corner]:
    """Cut a <p> stream into per-corner index triples.

    Each corner occupies ``len(input_set)`` consecutive values; an input reads
    the value at its offset within that tuple. Semantics other than VERTEX,
    NORMAL and TEXCOORD only take up space.

    Raises:
        ParseError: If the stream length is not a multiple of the input count
            or an input offset falls outside the tuple.
    """
    k = len(input_set)
    if k == 0:
        if stream:
            raise ParseError("Index stream present but no <input> elements declared")
        return []
    if len(stream) % k != 0:
        raise ParseError(
            f"Index stream length {len(stream)} is not a multiple of the input count {k}"
        )
    for inp in input_set.inputs:
        if inp.offset >= k:
            raise ParseError(
                f"Input {inp.semantic.value} offset {inp.offset} exceeds tuple size {k}"
            )

    corners: list[Corner] = []
    for i in range(0, len(stream), k):
        vert = normal = texcoord = 0
        for inp in input_set.inputs:
            if inp.semantic is Semantic.VERTEX:
                vert = stream[i + inp.offset]
            elif inp.semantic is Semantic.NORMAL:
                normal = stream[i + inp.offset]
            elif inp.semantic is Semantic.TEXCOORD:
                texcoord = stream[i + inp.offset]
        corners.append((vert, normal, texcoord))
    return corners


def weld(
    input_set: InputSet,
    corners: Iterable[Corner],
    sources: SourceTable,
    vertices: VerticesAlias,
) -> Mesh:
    """Intern corners into unified vertices.

    Unified indices are assigned in first-occurrence order, so the result
    depends only on corner order. Positions and normals read three
    components and texcoords two, whatever the source stride.

    Returns:
        Mesh whose attribute arrays hold one entry per distinct corner and
        whose indices address them. Attributes without an input stay empty.

    Raises:
        UnresolvedSourceError: If an input's source cannot be resolved.
        SourceError: If a corner indexes past the end of its source.
    """
    position_src = (
        resolve_source(input_set.vertex_source, sources, vertices)
        if input_set.has_vertices
        else None
    )
    normal_src = (
        resolve_source(input_set.normal_source, sources, vertices)
        if input_set.has_normals
        else None
    )
    texcoord_src = (
        resolve_source(input_set.texcoord_source, sources, vertices)
        if input_set.has_texcoords
        else None
    )

    cache = WeldCache()
    indices: list[int] = []
    positions: list[tuple[float, ...]] = []
    normals: list[tuple[float, ...]] = []
    texcoords: list[tuple[float, ...]] = []
    unified_count = 0

    for corner in corners:
        unified = cache.get(corner)
        if unified is None:
            unified = unified_count
            unified_count += 1
            cache.insert(corner, unified)
            vert, normal, texcoord = corner
            if position_src is not None:
                positions.append(position_src.vector(vert, 3))
            if normal_src is not None:
                normals.append(normal_src.vector(normal, 3))
            if texcoord_src is not None:
                texcoords.append(texcoord_src.vector(texcoord, 2))
        indices.append(unified)

    return Mesh(
        positions=np.array(positions, dtype=np.float64).reshape(-1, 3),
        normals=np.array(normals, dtype=np.float64).reshape(-1, 3),
        texcoords=np.array(texcoords, dtype=np.float64).reshape(-1, 2),
        indices=np.array(indices, dtype=np.uint32),
    )


def fan_triangulate(polygon: Sequence[Corner]) -> list[Corner]:
    """Fan-triangulate a convex polygon: (0,1,2), (0,2,3), ... (0,n-2,n-1)."""
    triangles: list[Corner] = []
    for j in range(1, len(polygon) - 1):
        triangles.extend((polygon[0], polygon[j], polygon[j + 1]))
    return triangles
