"""Coherency checks for triangle meshes: non-empty, manifold and oriented."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence, Tuple

__all__ = [
    "MeshError",
    "INSUFFICIENT_VERTICES",
    "INSUFFICIENT_TRIANGLES",
    "MESH_CONSISTENCY",
    "validate_mesh_coherency",
]

INSUFFICIENT_VERTICES = "mesh must contain at least 3 vertices"
INSUFFICIENT_TRIANGLES = "mesh must contain more than 3 triangles"
MESH_CONSISTENCY = "mesh must be non-empty, manifold and consistently oriented"


class MeshError(ValueError):
    """A mesh is not a coherent closed surface."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MeshError):
            return NotImplemented
        return self.message == other.message

    def __hash__(self) -> int:
        return hash((MeshError, self.message))


def _edges(triangle: Sequence[int]) -> Tuple[Tuple[int, int], ...]:
    v1, v2, v3 = triangle
    return ((v1, v2), (v2, v3), (v3, v1))


def validate_mesh_coherency(
    vertex_count: int, triangles: Iterable[Sequence[int]]
) -> None:
    """Raise :class:`MeshError` unless the mesh is manifold and oriented.

    ``triangles`` holds ``(v1, v2, v3)`` vertex indices. Every undirected edge
    must be walked exactly once in each direction.
    """
    faces = list(triangles)
    if vertex_count < 3:
        raise MeshError(INSUFFICIENT_VERTICES)
    if len(faces) <= 3:
        raise MeshError(INSUFFICIENT_TRIANGLES)

    ascending: Counter = Counter()
    descending: Counter = Counter()
    for face in faces:
        for a, b in _edges(face):
            key = (min(a, b), max(a, b))
            if a <= b:
                ascending[key] += 1
            else:
                descending[key] += 1

    for key in ascending.keys() | descending.keys():
        if ascending[key] != 1 or descending[key] != 1:
            raise MeshError(MESH_CONSISTENCY)