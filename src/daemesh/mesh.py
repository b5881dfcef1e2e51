"""Indexed triangle mesh container."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from daemesh.errors import ValidationError


def _empty_vec3() -> np.ndarray:
    return np.zeros((0, 3), dtype=np.float64)


def _empty_vec2() -> np.ndarray:
    return np.zeros((0, 2), dtype=np.float64)


def _empty_indices() -> np.ndarray:
    return np.zeros(0, dtype=np.uint32)


@dataclass
class Mesh:
    """Indexed triangle mesh with optional per-vertex normals and texcoords.

    ``normals`` and ``texcoords`` are either empty or have one row per
    position; a single ``indices`` array addresses all three.
    """

    positions: np.ndarray = field(default_factory=_empty_vec3)  # (N, 3) float64
    normals: np.ndarray = field(default_factory=_empty_vec3)  # (N, 3) or (0, 3)
    texcoords: np.ndarray = field(default_factory=_empty_vec2)  # (N, 2) or (0, 2)
    indices: np.ndarray = field(default_factory=_empty_indices)  # (M,) uint32
    comment: str = ""

    def __post_init__(self) -> None:
        try:
            self.positions = np.asarray(self.positions, dtype=np.float64).reshape(-1, 3)
            self.normals = np.asarray(self.normals, dtype=np.float64).reshape(-1, 3)
            self.texcoords = np.asarray(self.texcoords, dtype=np.float64).reshape(-1, 2)
            indices = np.asarray(self.indices, dtype=np.int64).reshape(-1)
        except (ValueError, TypeError, OverflowError) as e:
            raise ValidationError(f"Invalid mesh array: {e}") from e
        if len(indices) and int(indices.min()) < 0:
            raise ValidationError(f"Negative index {int(indices.min())} in mesh indices")
        if len(indices) and int(indices.max()) > np.iinfo(np.uint32).max:
            raise ValidationError(f"Index {int(indices.max())} does not fit in uint32")
        self.indices = indices.astype(np.uint32)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def has_normals(self) -> bool:
        return len(self.normals) > 0 and len(self.normals) == self.vertex_count

    @property
    def has_texcoords(self) -> bool:
        return len(self.texcoords) > 0 and len(self.texcoords) == self.vertex_count

    def clear(self) -> None:
        """Drop all geometry and the comment."""
        self.positions = _empty_vec3()
        self.normals = _empty_vec3()
        self.texcoords = _empty_vec2()
        self.indices = _empty_indices()
        self.comment = ""

    def append(self, other: Mesh) -> None:
        """Concatenate ``other`` onto this mesh, rebasing its indices.

        Attribute arrays are concatenated as-is; callers are responsible for
        keeping normals/texcoords coherent with positions.
        """
        vertex_offset = self.vertex_count
        self.indices = np.concatenate(
            [self.indices, other.indices.astype(np.uint32) + np.uint32(vertex_offset)]
        )
        self.positions = np.concatenate([self.positions, other.positions], axis=0)
        self.normals = np.concatenate([self.normals, other.normals], axis=0)
        self.texcoords = np.concatenate([self.texcoords, other.texcoords], axis=0)

    def validate(self) -> None:
        """Check the index invariants an exporter relies on.

        Raises:
            ValidationError: If the index count is not a multiple of 3 or an
                index is out of range.
        """
        if len(self.indices) % 3 != 0:
            raise ValidationError(
                f"Index count {len(self.indices)} is not a multiple of 3"
            )
        if len(self.indices) and int(self.indices.max()) >= self.vertex_count:
            raise ValidationError(
                f"Index {int(self.indices.max())} out of range for "
                f"{self.vertex_count} vertices"
            )
