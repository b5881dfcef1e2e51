"""Source arrays, vertices aliases and primitive inputs of a COLLADA <mesh>.

Element arguments are expected to have namespace-free tags (see
``daemesh.importer._strip_namespaces``).
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum

from daemesh.errors import ParseError, SourceError, UnresolvedSourceError


class Semantic(str, Enum):
    VERTEX = "VERTEX"
    NORMAL = "NORMAL"
    TEXCOORD = "TEXCOORD"
    POSITIONS = "POSITIONS"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str | None) -> Semantic:
        """Map a COLLADA ``semantic`` attribute to a Semantic; unknown names map to UNKNOWN."""
        if raw in ("POSITION", "POSITIONS"):
            return cls.POSITIONS
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


@dataclass
class Source:
    """A strided float array with its accessor description."""

    values: list[float]
    stride: int
    count: int
    offset: int = 0
    params: list[str] = field(default_factory=list)

    def component(self, index: int, comp: int) -> float:
        """Read component ``comp`` of element ``index``; components past the stride read 0."""
        if comp >= self.stride:
            return 0.0
        if index >= self.count:
            raise SourceError(f"Index {index} out of range for source with {self.count} elements")
        return self.values[self.offset + index * self.stride + comp]

    def vector(self, index: int, size: int) -> tuple[float, ...]:
        return tuple(self.component(index, c) for c in range(size))


@dataclass(frozen=True)
class Input:
    """A semantic binding to a source; ``offset`` is the slot within a <p> tuple."""

    semantic: Semantic
    source: str
    offset: int = 0


@dataclass
class InputSet:
    """The inputs of one primitives element plus the attribute sources they select."""

    inputs: list[Input] = field(default_factory=list)
    vertex_source: str | None = None
    normal_source: str | None = None
    texcoord_source: str | None = None

    @property
    def has_vertices(self) -> bool:
        return self.vertex_source is not None

    @property
    def has_normals(self) -> bool:
        return self.normal_source is not None

    @property
    def has_texcoords(self) -> bool:
        return self.texcoord_source is not None

    def __len__(self) -> int:
        return len(self.inputs)


SourceTable = dict[str, Source]
VerticesAlias = dict[str, list[Input]]


def strip_ref(ref: str | None) -> str:
    """Turn a ``#id`` URI fragment into a bare id."""
    if not ref:
        return ""
    return ref[1:] if ref.startswith("#") else ref


def parse_int(raw: str | None, what: str, *, error: type[Exception] = ParseError) -> int:
    """Parse an integer attribute, raising ``error`` with context on failure."""
    if raw is None:
        raise error(f"Missing {what}")
    try:
        return int(raw)
    except ValueError:
        raise error(f"Invalid {what}: {raw!r}") from None


def parse_index_array(elem: ET.Element | None, what: str = "<p>") -> list[int]:
    """Parse whitespace-separated non-negative integers from an element's text."""
    if elem is None or not elem.text:
        return []
    try:
        values = [int(tok) for tok in elem.text.split()]
    except ValueError as e:
        raise ParseError(f"Invalid integer in {what}: {e}") from e
    if any(v < 0 for v in values):
        raise ParseError(f"Negative index in {what}")
    return values


def parse_source(elem: ET.Element) -> Source:
    """Parse one <source> element into a Source.

    Raises:
        SourceError: If the accessor is missing, stride/count are missing or
            invalid, the float array does not parse, or it is too short for
            the accessor.
    """
    source_id = elem.get("id", "")
    float_array = elem.find("float_array")
    if float_array is None:
        raise SourceError(f"Source {source_id!r} has no <float_array>")
    try:
        values = [float(tok) for tok in (float_array.text or "").split()]
    except ValueError as e:
        raise SourceError(f"Source {source_id!r}: invalid float array: {e}") from e

    accessor = elem.find("technique_common/accessor")
    if accessor is None:
        raise SourceError(f"Source {source_id!r} has no <technique_common>/<accessor>")

    stride = parse_int(accessor.get("stride"), f"stride in source {source_id!r}", error=SourceError)
    if stride < 1:
        raise SourceError(f"Source {source_id!r}: stride must be positive, got {stride}")
    count = parse_int(accessor.get("count"), f"count in source {source_id!r}", error=SourceError)
    offset = parse_int(
        accessor.get("offset", "0"), f"offset in source {source_id!r}", error=SourceError
    )
    if count < 0 or offset < 0:
        raise SourceError(f"Source {source_id!r}: count and offset must be non-negative")
    if offset + count * stride > len(values):
        raise SourceError(
            f"Source {source_id!r}: accessor needs {offset + count * stride} values, "
            f"float array has {len(values)}"
        )

    params = [p.get("name", "") for p in accessor.findall("param")]
    return Source(values=values, stride=stride, count=count, offset=offset, params=params)


def parse_source_table(mesh_elem: ET.Element) -> SourceTable:
    """Collect the float sources of a <mesh> keyed by id."""
    table: SourceTable = {}
    for elem in mesh_elem.findall("source"):
        if elem.find("float_array") is None:
            # Name_array / IDREF_array / bool_array sources carry no geometry
            continue
        source_id = elem.get("id")
        if not source_id:
            raise ParseError("<source> element without an id")
        table[source_id] = parse_source(elem)
    return table


def parse_vertices_alias(mesh_elem: ET.Element) -> VerticesAlias:
    """Parse the optional <vertices> element of a <mesh>."""
    alias: VerticesAlias = {}
    elem = mesh_elem.find("vertices")
    if elem is None:
        return alias
    vertices_id = elem.get("id")
    if not vertices_id:
        raise ParseError("<vertices> element without an id")
    alias[vertices_id] = [
        Input(semantic=Semantic.parse(inp.get("semantic")), source=strip_ref(inp.get("source")))
        for inp in elem.findall("input")
    ]
    return alias


def resolve_source(name: str, sources: SourceTable, vertices: VerticesAlias) -> Source:
    """Find the source behind ``name``, following at most one <vertices> hop.

    Raises:
        UnresolvedSourceError: If neither table yields a source.
    """
    if name in sources:
        return sources[name]
    for inp in vertices.get(name, ()):
        if inp.source in sources:
            return sources[inp.source]
    raise UnresolvedSourceError(f"Unresolved source reference: #{name}")


def parse_inputs(prim_elem: ET.Element) -> InputSet:
    """Read the direct <input> children of a <triangles> or <polylist> element."""
    input_set = InputSet()
    for elem in prim_elem.findall("input"):
        inp = Input(
            semantic=Semantic.parse(elem.get("semantic")),
            source=strip_ref(elem.get("source")),
            offset=parse_int(elem.get("offset", "0"), "input offset"),
        )
        if inp.offset < 0:
            raise ParseError(f"Negative input offset: {inp.offset}")
        input_set.inputs.append(inp)
        if inp.semantic is Semantic.VERTEX:
            input_set.vertex_source = inp.source
        elif inp.semantic is Semantic.NORMAL:
            input_set.normal_source = inp.source
        elif inp.semantic is Semantic.TEXCOORD:
            input_set.texcoord_source = inp.source
    return input_set
